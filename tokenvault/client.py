from typing import Any, Callable, Dict, List, Optional, Union

import httpx

from tokenvault.batch import BatchOrchestrator
from tokenvault.channel import SecureChannel
from tokenvault.common.config import TransportConfig
from tokenvault.common.version import VersionGuard
from tokenvault.transport import TransportClient


class Client:
    """
    Client for a tokenization server.

    Holds only the transport; every operation generates its own ephemeral
    keypair, so one Client can be shared across threads.

    :param config: TransportConfig, or just the server URL
    :param http_client: optional preconfigured httpx.Client
    """

    def __init__(
        self,
        config: Union[TransportConfig, str],
        http_client: Optional[httpx.Client] = None,
    ):
        if isinstance(config, str):
            config = TransportConfig(base_url=config)

        self.transport = TransportClient(
            config,
            http_client=http_client,
            version_guard=VersionGuard(config.accepted_version),
        )
        self._protection = BatchOrchestrator(self.transport, "protection")
        self._vault = BatchOrchestrator(self.transport, "vault")
        self._channel = SecureChannel(self.transport)

    # ------------------------ Protection ------------------------

    def secure_protection_send(self, credential: str, values: List[List[Any]]) -> Dict[str, List[List[str]]]:
        """
        Send encrypted protection data to the server.

        The group order must match the protection_id order used when the
        credential was issued.

            client.secure_protection_send(cred, [["123", "456"], ["789"]])
            # {"tokens": [["tA", "tB"], ["tC"]]}
        """
        return self._protection.send(credential, values)

    def secure_protection_receive(self, credential: str, tokens: List[List[str]]) -> Dict[str, List[List[Any]]]:
        """Fetch and decrypt protection data; same shape as `tokens`."""
        return self._protection.receive(credential, tokens)

    # ------------------------ Vault ------------------------

    def secure_vault_send(self, credential: str, values: List[List[Any]]) -> Dict[str, List[List[str]]]:
        """Send encrypted vault data; groups follow the vault_id order."""
        return self._vault.send(credential, values)

    def secure_vault_receive(self, credential: str, tokens: List[List[str]]) -> Dict[str, List[List[Any]]]:
        return self._vault.receive(credential, tokens)

    # ------------------------ Legacy secure channel ------------------------

    def secure_channel_insert(self, credential: str, value: Any) -> Dict[str, str]:
        """Stage one value; returns {"id", "token"}. Call secure_channel_commit(id) after persisting."""
        return self._channel.insert(credential, value)

    def secure_channel_commit(self, channel_id: str) -> None:
        self._channel.commit(channel_id)

    def secure_channel_send(
        self,
        credential: str,
        values: List[Any],
        persist: Callable[[List[str]], Any],
    ) -> List[str]:
        """insert -> persist(tokens) -> commit, see SecureChannel.stage_and_commit."""
        return self._channel.stage_and_commit(credential, values, persist)

    # ------------------------

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
