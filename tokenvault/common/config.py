"""Transport configuration + environment loading (see .env.example)."""

import os
from typing import Dict, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from tokenvault.common.version import PROTOCOL_VERSION


class TransportConfig(BaseModel):
    """
    Everything a TransportClient needs. Passed in explicitly; there is
    no module-level HTTP client.
    """

    base_url: str
    timeout: float = 30.0
    connect_timeout: float = 10.0
    headers: Dict[str, str] = Field(default_factory=dict)
    accepted_version: str = PROTOCOL_VERSION


def load_env() -> Tuple[TransportConfig, TransportConfig]:
    """
    Read SDK settings from the environment (and a .env file if present).

    Returns (tokenization service config, application backend config).
    """
    load_dotenv()

    service_url = os.getenv("TOKENVAULT_URL", "http://127.0.0.1:3200")
    backend_url = os.getenv("TOKENVAULT_BACKEND_URL", "http://127.0.0.1:4000")
    timeout = float(os.getenv("TOKENVAULT_TIMEOUT", "30"))
    version = os.getenv("TOKENVAULT_PROTOCOL_VERSION", PROTOCOL_VERSION)

    service = TransportConfig(base_url=service_url, timeout=timeout, accepted_version=version)
    backend = TransportConfig(base_url=backend_url, timeout=timeout)
    return service, backend
