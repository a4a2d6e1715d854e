"""
Batched send/receive for one namespace (protection, vault).

One handshake per call, every value sealed/opened against that session,
one store/fetch request for the whole batch. Results keep the caller's
group/item order.
"""

import logging
from typing import Any, Dict, List

from tokenvault.common.errors import ShapeMismatchError
from tokenvault.common.protocol import (
    FetchRequest,
    FetchResponse,
    StoreRequest,
    StoreResponse,
    parse_response,
)
from tokenvault.common.utils import encode_value, ensure_groups, shape_of
from tokenvault.crypto.box import box_open, box_seal_bytes
from tokenvault.crypto.keys import generate_keypair
from tokenvault.handshake import begin
from tokenvault.transport import TransportClient

logger = logging.getLogger(__name__)

SECURE_PATH = "/api/secure"


def check_shape(sent, received, what: str) -> None:
    expected, actual = shape_of(sent), shape_of(received)
    if expected != actual:
        logger.warning("[BATCH] %s shape mismatch: %s != %s", what, expected, actual)
        raise ShapeMismatchError(expected, actual)


class BatchOrchestrator:
    def __init__(self, transport: TransportClient, namespace: str):
        self.transport = transport
        self.namespace = namespace
        self.base_path = f"{SECURE_PATH}/{namespace}"

    def send(self, credential: str, values: List[List[Any]]) -> Dict[str, List[List[str]]]:
        """
        Encrypt and store `values`.

        :param credential: WRITE credential from the application backend
        :param values: groups of values, in the field order used at init
        :return: {"tokens": [[token, ...], ...]} in the same shape
        """
        groups = ensure_groups(values, "values")
        # every value is encoded before the handshake
        plaintexts = [[encode_value(v) for v in group] for group in groups]

        keypair = generate_keypair()
        session = begin(self.transport, f"{self.base_path}/begin", credential, keypair.public_key)

        full_texts = [
            [box_seal_bytes(p, session.server_public_key, keypair.private_key) for p in group]
            for group in plaintexts
        ]
        logger.debug("[BATCH] %s: sealed shape %s", self.namespace, shape_of(full_texts))

        req = StoreRequest(credential=credential, values=full_texts)
        data = self.transport.post(f"{self.base_path}/store", req.model_dump())
        resp = parse_response(StoreResponse, data, "store")

        check_shape(groups, resp.tokens, "store")
        return {"tokens": resp.tokens}

    def receive(self, credential: str, tokens: List[List[str]]) -> Dict[str, List[List[Any]]]:
        """
        Fetch and decrypt the values behind `tokens`.

        :param credential: READ credential from the application backend
        :param tokens: groups of tokens as returned by send()
        :return: {"values": [[value, ...], ...]} in the same shape
        """
        groups = ensure_groups(tokens, "tokens", item_type=str)
        keypair = generate_keypair()
        session = begin(self.transport, f"{self.base_path}/begin", credential, keypair.public_key)

        req = FetchRequest(credential=credential, tokens=groups)
        data = self.transport.post(f"{self.base_path}/fetch", req.model_dump())
        resp = parse_response(FetchResponse, data, "fetch")

        check_shape(groups, resp.values, "fetch")
        values = [
            [box_open(w, session.server_public_key, keypair.private_key) for w in group]
            for group in resp.values
        ]
        logger.debug("[BATCH] %s: opened shape %s", self.namespace, shape_of(values))
        return {"values": values}
