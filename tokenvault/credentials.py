"""Client for the application backend that issues credentials."""

import logging
from typing import List, Optional

import httpx

from tokenvault.common.config import TransportConfig
from tokenvault.common.protocol import CredentialResponse, parse_response
from tokenvault.transport import TransportClient

logger = logging.getLogger(__name__)

OPERATIONS = ("READ", "WRITE")


class CredentialSource:
    """
    POST /api/secure/{namespace}/init on the application backend.

    The credential is opaque to the SDK; no local expiry check is made.
    """

    def __init__(self, config: TransportConfig, http_client: Optional[httpx.Client] = None):
        # the application backend is not versioned like the tokenization service
        self.transport = TransportClient(config, http_client=http_client)

    def request(self, namespace: str, operation: str, ids: List[str], ttl: int = 1) -> str:
        if operation not in OPERATIONS:
            raise ValueError(f"operation must be one of {OPERATIONS}, got {operation!r}")
        if not ids:
            raise ValueError("at least one field id is required")

        body = {"operation": operation, f"{namespace}_ids": list(ids), "ttl": ttl}
        data = self.transport.post(f"/api/secure/{namespace}/init", body)
        resp = parse_response(CredentialResponse, data, "init")

        logger.info("[CRED] %s credential issued for %d %s field(s)", operation, len(ids), namespace)
        return resp.credential

    def close(self) -> None:
        self.transport.close()
