"""
Execution client JSON-RPC access: block headers by number and by time.
"""

import itertools
import logging
from typing import Optional

import requests

from .collaborators import ExecutionChainClient
from .errors import ExecutionClientError, MissingExecutionPairing
from .models import BlockHeader, DeriveByTime, DirectByNumber, PairingMode
from .networks import MAX_CONCURRENT_EXECUTION_REQUESTS
from .transport import fetch_with_retry, make_session, MAX_RETRIES, REQUEST_TIMEOUT

log = logging.getLogger(__name__)

DEFAULT_EC_URL = "http://localhost:8545"


def _parse_header(raw: dict) -> BlockHeader:
    return BlockHeader(
        number=int(raw["number"], 16),
        hash=raw["hash"],
        timestamp=int(raw["timestamp"], 16),
    )


class ExecutionClient:
    """
    Minimal eth_* JSON-RPC client.

    `max_concurrency` is the largest number of requests expected to be in
    flight at once; the connection pool keeps that many connections alive
    so callers issuing concurrent reads reuse them.
    """

    def __init__(
        self,
        url: str = DEFAULT_EC_URL,
        max_concurrency: int = MAX_CONCURRENT_EXECUTION_REQUESTS,
        session: Optional[requests.Session] = None,
        max_retries: int = MAX_RETRIES,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.url = url
        self.max_concurrency = max_concurrency
        self.session = session or make_session(pool_maxsize=max_concurrency)
        self.max_retries = max_retries
        self.timeout = timeout
        self._ids = itertools.count(1)

    def _call(self, method: str, params: list):
        body = {"jsonrpc": "2.0", "method": method, "params": params, "id": next(self._ids)}
        status, data, err = fetch_with_retry(
            self.session, "POST", self.url, json_body=body,
            max_retries=self.max_retries, timeout=self.timeout,
        )
        if err:
            raise ExecutionClientError(f"{method} failed: {err}")
        if "error" in data:
            raise ExecutionClientError(f"{method} failed: {data['error']}")
        return data.get("result")

    def header_by_number(self, number: Optional[int] = None) -> Optional[BlockHeader]:
        """Return the header of block `number` (latest if None), or None if the node doesn't have it."""
        tag = "latest" if number is None else hex(number)
        raw = self._call("eth_getBlockByNumber", [tag, False])
        if raw is None:
            return None
        return _parse_header(raw)

    def header_by_time(self, timestamp: int) -> Optional[BlockHeader]:
        """
        Return the latest block whose timestamp is at or before `timestamp`.
        None if the chain starts after it.
        """
        latest = self.header_by_number(None)
        if latest is None:
            raise ExecutionClientError("execution client returned no latest block")
        if latest.timestamp <= timestamp:
            return latest

        best = None
        lo, hi = 0, latest.number
        while lo <= hi:
            mid = (lo + hi) // 2
            header = self.header_by_number(mid)
            if header is None:
                raise ExecutionClientError(f"execution client is missing block {mid}")
            if header.timestamp <= timestamp:
                best = header
                if header.timestamp == timestamp:
                    break
                lo = mid + 1
            else:
                hi = mid - 1

        log.debug("Matched time %d to EL block %s", timestamp, best.number if best else None)
        return best


def resolve_pairing(ec: ExecutionChainClient, pairing: PairingMode, slot: int) -> BlockHeader:
    """Fetch the execution header paired with a beacon slot."""
    if isinstance(pairing, DirectByNumber):
        header = ec.header_by_number(pairing.number)
        if header is None:
            raise MissingExecutionPairing(slot, pairing.number)
        return header

    if isinstance(pairing, DeriveByTime):
        # No EL data so the merge hasn't happened yet; match on the slot's time
        header = ec.header_by_time(pairing.timestamp)
        if header is None:
            raise MissingExecutionPairing(slot)
        return header

    raise TypeError(f"unknown pairing mode {pairing!r}")
