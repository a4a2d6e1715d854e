"""
Begin step: trade the client's ephemeral public key and a credential for
the server's ephemeral public key.
"""

import logging
from typing import NamedTuple, Optional

from tokenvault.common.errors import ProtocolError
from tokenvault.common.protocol import BeginRequest, BeginResponse, ChannelBeginResponse, parse_response
from tokenvault.common.utils import b64_decode, b64_encode
from tokenvault.crypto.keys import KEY_SIZE, check_key
from tokenvault.transport import TransportClient

logger = logging.getLogger(__name__)


class HandshakeResult(NamedTuple):
    server_public_key: bytes
    session_id: Optional[str] = None


def begin(
    transport: TransportClient,
    path: str,
    credential: str,
    client_public_key: bytes,
    require_session_id: bool = False,
) -> HandshakeResult:
    """
    POST {credential, client_public_key} to `path`.

    :param require_session_id: legacy secure channel; the response must
        also carry the session `id`.
    :return: HandshakeResult(server_public_key, session_id)
    """
    if not isinstance(credential, str) or not credential:
        raise ValueError("credential must be a non-empty string")
    check_key(client_public_key, "client public key")

    req = BeginRequest(credential=credential, client_public_key=b64_encode(client_public_key))
    data = transport.post(path, req.model_dump())

    model = ChannelBeginResponse if require_session_id else BeginResponse
    resp = parse_response(model, data, "begin")

    try:
        server_public_key = b64_decode(resp.server_public_key)
    except ValueError as e:
        raise ProtocolError("server_public_key is not base64") from e
    if len(server_public_key) != KEY_SIZE:
        raise ProtocolError(f"server_public_key must be {KEY_SIZE} bytes, got {len(server_public_key)}")

    session_id = getattr(resp, "id", None)
    logger.debug("[HANDSHAKE] %s ok%s", path, f" (session {session_id})" if session_id else "")
    return HandshakeResult(server_public_key=server_public_key, session_id=session_id)
