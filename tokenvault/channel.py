"""
Legacy secure channel: one handshake and one round trip per value, with a
two-phase insert -> commit flow.

An inserted but uncommitted item is left for the server to expire; the
client never rolls anything back.
"""

import logging
from typing import Any, Callable, Dict, List

from tokenvault.common.protocol import ChannelInsertRequest, ChannelInsertResponse, parse_response
from tokenvault.common.utils import encode_value
from tokenvault.crypto.box import box_seal_bytes
from tokenvault.crypto.keys import generate_keypair
from tokenvault.handshake import begin
from tokenvault.transport import TransportClient

logger = logging.getLogger(__name__)

CHANNEL_PATH = "/api/secure-channel"


class SecureChannel:
    def __init__(self, transport: TransportClient):
        self.transport = transport

    def insert(self, credential: str, value: Any) -> Dict[str, str]:
        """
        Stage one value. The token is not final until commit(id).

        :return: {"id": session id, "token": token}
        """
        plaintext = encode_value(value)
        keypair = generate_keypair()
        session = begin(
            self.transport,
            f"{CHANNEL_PATH}/begin",
            credential,
            keypair.public_key,
            require_session_id=True,
        )

        full_text = box_seal_bytes(plaintext, session.server_public_key, keypair.private_key)
        req = ChannelInsertRequest(credential=credential, data=full_text)
        data = self.transport.post(f"{CHANNEL_PATH}/{session.session_id}/insert", req.model_dump())
        resp = parse_response(ChannelInsertResponse, data, "insert")

        logger.debug("[CHANNEL] staged session %s", session.session_id)
        return {"id": session.session_id, "token": resp.token}

    def commit(self, channel_id: str) -> None:
        """Finalize one previously inserted item."""
        if not channel_id:
            raise ValueError("channel id must be non-empty")
        self.transport.post(f"{CHANNEL_PATH}/{channel_id}/commit")
        logger.debug("[CHANNEL] committed session %s", channel_id)

    def stage_and_commit(
        self,
        credential: str,
        values: List[Any],
        persist: Callable[[List[str]], Any],
    ) -> List[str]:
        """
        insert every value, call persist(tokens), then commit every item.

        If persist raises, nothing is committed and the error propagates;
        the staged sessions expire server-side.
        """
        staged = [self.insert(credential, v) for v in values]
        tokens = [item["token"] for item in staged]

        try:
            persist(tokens)
        except Exception:
            logger.warning("[CHANNEL] persist failed, %d staged item(s) left uncommitted", len(staged))
            raise

        for item in staged:
            self.commit(item["id"])
        return tokens
