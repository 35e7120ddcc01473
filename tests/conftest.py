import pytest

from tests.helpers.fakes import FakeBeacon, FakeExecution, make_converter
from treegen.override import BoundaryOverrider
from treegen.slot_locator import FinalizedSlotLocator


@pytest.fixture
def converter():
    return make_converter()


@pytest.fixture
def bn():
    return FakeBeacon()


@pytest.fixture
def ec(converter):
    return FakeExecution(converter)


@pytest.fixture
def locator(bn, converter):
    return FinalizedSlotLocator(bn, converter)


@pytest.fixture
def overrider(locator, converter, ec):
    return BoundaryOverrider(locator, converter, ec)
