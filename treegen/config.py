"""
Runtime settings. Defaults come from module constants, environment
variables (TREEGEN_*) override them, and CLI flags override both.
"""

import os
from dataclasses import dataclass, field

from .beacon import DEFAULT_BN_URLS
from .execution import DEFAULT_EC_URL
from .networks import MAX_CONCURRENT_EXECUTION_REQUESTS
from .transport import MAX_RETRIES, REQUEST_TIMEOUT


@dataclass
class Settings:
    ec_endpoint: str = DEFAULT_EC_URL
    bn_endpoints: list = field(default_factory=lambda: list(DEFAULT_BN_URLS))
    max_concurrent_ec_requests: int = MAX_CONCURRENT_EXECUTION_REQUESTS
    request_timeout: float = REQUEST_TIMEOUT
    max_retries: int = MAX_RETRIES

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ
        settings = cls()
        if env.get("TREEGEN_EC_ENDPOINT"):
            settings.ec_endpoint = env["TREEGEN_EC_ENDPOINT"]
        if env.get("TREEGEN_BN_ENDPOINTS"):
            settings.bn_endpoints = [u.strip() for u in env["TREEGEN_BN_ENDPOINTS"].split(",") if u.strip()]
        if env.get("TREEGEN_MAX_CONCURRENT_EC_REQUESTS"):
            settings.max_concurrent_ec_requests = int(env["TREEGEN_MAX_CONCURRENT_EC_REQUESTS"])
        if env.get("TREEGEN_REQUEST_TIMEOUT"):
            settings.request_timeout = float(env["TREEGEN_REQUEST_TIMEOUT"])
        if env.get("TREEGEN_MAX_RETRIES"):
            settings.max_retries = int(env["TREEGEN_MAX_RETRIES"])
        return settings
