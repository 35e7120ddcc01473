"""
Recover a finished interval's boundary from its published rewards event,
and check a regenerated Merkle root against the canonical one.
"""

import logging
from typing import Optional, Union

from .collaborators import ExecutionChainClient, ProtocolStateReader
from .errors import UnknownInterval
from .execution import resolve_pairing
from .models import DirectByNumber, Reconstruction, RootValidation, SnapshotCoordinate
from .override import BoundaryOverrider

log = logging.getLogger(__name__)

ROOT_SIZE = 32


def normalize_root(root: Union[bytes, str]) -> bytes:
    """Accept a 32-byte digest as raw bytes or 0x-prefixed hex."""
    if isinstance(root, str):
        root = bytes.fromhex(root[2:] if root.lower().startswith("0x") else root)
    root = bytes(root)
    if len(root) != ROOT_SIZE:
        raise ValueError(f"expected a {ROOT_SIZE}-byte root, got {len(root)} bytes")
    return root


class PastIntervalReconstructor:
    def __init__(self, ec: ExecutionChainClient, state_reader: ProtocolStateReader, overrider: BoundaryOverrider):
        self.ec = ec
        self.state_reader = state_reader
        self.overrider = overrider

    def reconstruct(self, index: int, target_epoch: Optional[int] = None) -> Reconstruction:
        event = self.state_reader.commitment_event_for_index(index)
        if event is None:
            raise UnknownInterval(index)
        log.info(
            "Found rewards submission event: Beacon block %d, execution block %d",
            event.consensus_block, event.execution_block,
        )

        if target_epoch is not None:
            log.info("Overriding the target epoch to %d", target_epoch)
            event = self.overrider.override(event, target_epoch)

        header = resolve_pairing(self.ec, DirectByNumber(event.execution_block), event.consensus_block)
        coordinate = SnapshotCoordinate(
            interval_index=event.index,
            start_time=event.start_time,
            end_time=event.end_time,
            consensus_block=event.consensus_block,
            execution_header=header,
            intervals_elapsed=event.intervals_elapsed,
        )
        return Reconstruction(event=event, coordinate=coordinate, target_epoch=target_epoch)

    def validate_root(self, result: Reconstruction, root: Union[bytes, str]) -> RootValidation:
        """
        Compare a regenerated root with the canonical one. Overridden
        reconstructions cover a different span and are never compared.
        A mismatch is reported, not raised.
        """
        if result.overridden:
            return RootValidation(checked=False)

        candidate = normalize_root(root)
        canonical = normalize_root(result.event.canonical_root)
        validation = RootValidation(
            checked=True,
            matches=candidate == canonical,
            root="0x" + candidate.hex(),
            canonical_root="0x" + canonical.hex(),
        )
        if validation.matches:
            log.info(
                "Your Merkle tree's root of %s matches the canonical root! "
                "You will be able to use this file for claiming rewards.", validation.root,
            )
        else:
            log.warning(
                "Your Merkle tree had a root of %s, but the canonical Merkle tree's root was %s. "
                "This file will not be usable for claiming rewards.",
                validation.root, validation.canonical_root,
            )
        return validation
