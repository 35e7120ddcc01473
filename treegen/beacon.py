"""
Beacon Node REST API client.

Only the handful of endpoints needed to locate snapshot slots are wrapped:
block lookup by slot, finality checkpoints at head, and the chain config.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from .errors import BeaconClientError
from .transport import fetch_with_retry, make_session, MAX_RETRIES, REQUEST_TIMEOUT

log = logging.getLogger(__name__)

DEFAULT_BN_URLS = ["http://localhost:5052"]


@dataclass(frozen=True)
class BeaconBlock:
    slot: int
    proposer_index: int
    # 0 before the merge: the block carries no execution payload
    execution_block_number: int


@dataclass(frozen=True)
class BeaconHead:
    finalized_epoch: int


@dataclass(frozen=True)
class ChainConfig:
    genesis_time: int
    genesis_epoch: int
    slots_per_epoch: int
    seconds_per_slot: int
    seconds_per_epoch: int
    chain_id: int


class BeaconNodeClient:
    """Tries each provider in order and returns the first successful answer."""

    def __init__(
        self,
        rpc_urls: Optional[list] = None,
        session: Optional[requests.Session] = None,
        max_retries: int = MAX_RETRIES,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.rpc_urls = [u.rstrip("/") for u in (rpc_urls or DEFAULT_BN_URLS)]
        self.session = session or make_session()
        self.max_retries = max_retries
        self.timeout = timeout

    def _get(self, path: str, allow_missing: bool = False) -> Optional[dict]:
        errors = []
        for rpc_base in self.rpc_urls:
            url = f"{rpc_base}{path}"
            status, data, err = fetch_with_retry(
                self.session, "GET", url, max_retries=self.max_retries, timeout=self.timeout
            )
            if status == 404 and allow_missing:
                return None
            if err:
                errors.append(f"{url}: {err}")
                continue
            if not data or "data" not in data:
                errors.append(f"{url}: unexpected format {str(data)[:200]}")
                continue
            return data["data"]
        raise BeaconClientError(f"all beacon node providers failed for {path}: {'; '.join(errors)}")

    def get_block(self, slot: int) -> tuple:
        """Return (BeaconBlock | None, exists) for a slot; a missed slot is (None, False)."""
        data = self._get(f"/eth/v2/beacon/blocks/{slot}", allow_missing=True)
        if data is None:
            return None, False

        msg = data.get("message", {})
        payload = msg.get("body", {}).get("execution_payload") or {}
        block = BeaconBlock(
            slot=int(msg.get("slot", slot)),
            proposer_index=int(msg.get("proposer_index", 0)),
            execution_block_number=int(payload.get("block_number", 0)),
        )
        return block, True

    def get_head(self) -> BeaconHead:
        data = self._get("/eth/v1/beacon/states/head/finality_checkpoints")
        return BeaconHead(finalized_epoch=int(data["finalized"]["epoch"]))

    def get_chain_config(self) -> ChainConfig:
        genesis = self._get("/eth/v1/beacon/genesis")
        spec = self._get("/eth/v1/config/spec")
        deposit = self._get("/eth/v1/config/deposit_contract")

        slots_per_epoch = int(spec["SLOTS_PER_EPOCH"])
        seconds_per_slot = int(spec["SECONDS_PER_SLOT"])
        cfg = ChainConfig(
            genesis_time=int(genesis["genesis_time"]),
            genesis_epoch=0,
            slots_per_epoch=slots_per_epoch,
            seconds_per_slot=seconds_per_slot,
            seconds_per_epoch=slots_per_epoch * seconds_per_slot,
            chain_id=int(deposit["chain_id"]),
        )
        log.debug("Beacon config: %s", cfg)
        return cfg
