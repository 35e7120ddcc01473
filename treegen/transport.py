"""HTTP helpers shared by the beacon and execution clients."""

import logging
import time
from typing import Optional

import requests
from requests.adapters import HTTPAdapter

log = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRY_BACKOFF_BASE = 2  # seconds
REQUEST_TIMEOUT = 30


def fetch_with_retry(
    session: requests.Session,
    method: str,
    url: str,
    json_body=None,
    max_retries: int = MAX_RETRIES,
    timeout: float = REQUEST_TIMEOUT,
) -> tuple:
    """
    Issue a request with retry on 429/5xx and connection errors.
    Returns (status_code, json_response | None, error_msg | None).
    A 404 is returned straight away: callers treat it as "not found".
    """
    for attempt in range(max_retries):
        try:
            resp = session.request(method, url, json=json_body, timeout=timeout)
            if resp.status_code == 200:
                return resp.status_code, resp.json(), None
            elif resp.status_code == 429 or resp.status_code >= 500:
                if attempt == max_retries - 1:
                    break
                wait = RETRY_BACKOFF_BASE ** (attempt + 1)
                reset = resp.headers.get("ratelimit-reset")
                if reset:
                    try:
                        wait = max(wait, int(reset))
                    except ValueError:
                        pass
                log.warning("%s on attempt %d for %s, retrying in %ds", resp.status_code, attempt + 1, url, wait)
                time.sleep(wait)
            else:
                return resp.status_code, None, f"HTTP {resp.status_code}: {resp.text[:200]}"
        except requests.RequestException as e:
            if attempt == max_retries - 1:
                return 0, None, f"Connection error: {e}"
            wait = RETRY_BACKOFF_BASE ** (attempt + 1)
            log.warning("Connection error on attempt %d for %s, retrying in %ds", attempt + 1, url, wait)
            time.sleep(wait)
    return 0, None, "Max retries exceeded"


def make_session(pool_maxsize: Optional[int] = None) -> requests.Session:
    """Session whose connection pool keeps up to `pool_maxsize` idle connections per host."""
    session = requests.Session()
    if pool_maxsize:
        adapter = HTTPAdapter(pool_connections=1, pool_maxsize=pool_maxsize)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
    return session
