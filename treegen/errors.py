"""
Error kinds raised while resolving interval boundaries.

Every error carries the epoch / slot / index that triggered it so callers
can report it without re-deriving context.
"""

from typing import Optional


class TreegenError(Exception):
    """Base class for all boundary-resolution failures."""


# ─── Chain identification ────────────────────────────────────────────────────

class ChainIdentificationFailure(TreegenError):
    def __init__(self, chain_id: int):
        self.chain_id = chain_id
        super().__init__(f"beacon node is configured for an unknown network with chain ID [{chain_id}]")


# ─── Slot / epoch arithmetic ─────────────────────────────────────────────────

class InvalidSlot(TreegenError):
    def __init__(self, slot: int, genesis_slot: int = 0):
        self.slot = slot
        self.genesis_slot = genesis_slot
        super().__init__(f"slot {slot} predates the genesis slot {genesis_slot}")


class NoProposedBlockInEpoch(TreegenError):
    def __init__(self, epoch: int):
        self.epoch = epoch
        super().__init__(f"epoch {epoch} appears to have had no blocks proposed, or all are missing from the beacon node")


class EpochNotFinalized(TreegenError):
    def __init__(self, target_epoch: int, finalized_epoch: int):
        self.target_epoch = target_epoch
        self.finalized_epoch = finalized_epoch
        super().__init__(
            f"target epoch {target_epoch} is not finalized yet; latest finalized epoch is {finalized_epoch}"
        )


# ─── Boundary overrides ──────────────────────────────────────────────────────

class TargetOutsideInterval(TreegenError):
    def __init__(self, target_epoch: int, index: int, start_epoch: int, end_epoch: int):
        self.target_epoch = target_epoch
        self.index = index
        self.start_epoch = start_epoch
        self.end_epoch = end_epoch
        super().__init__(
            f"target epoch {target_epoch} not in interval {index} range {start_epoch} - {end_epoch}"
        )


class PreMergeTargetUnsupported(TreegenError):
    def __init__(self, target_epoch: int, slot: int):
        self.target_epoch = target_epoch
        self.slot = slot
        super().__init__(
            f"target epoch {target_epoch} block at slot {slot} doesn't have an execution block. pre-merge?"
        )


# ─── Historical intervals ────────────────────────────────────────────────────

class UnknownInterval(TreegenError):
    def __init__(self, index: int):
        self.index = index
        super().__init__(f"no rewards commitment event found for interval {index}")


class MissingExecutionPairing(TreegenError):
    def __init__(self, slot: Optional[int], execution_block: Optional[int] = None):
        self.slot = slot
        self.execution_block = execution_block
        if execution_block is None:
            detail = "no execution block could be matched"
        else:
            detail = f"execution block {execution_block} could not be retrieved"
        super().__init__(f"slot {slot}: {detail}")


# ─── Transport ───────────────────────────────────────────────────────────────

class BeaconClientError(TreegenError):
    """A beacon node request failed after retries on every provider."""


class ExecutionClientError(TreegenError):
    """An execution client JSON-RPC request failed."""
