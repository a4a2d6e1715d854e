"""
In-process fake tokenization server behind httpx.MockTransport.

The server side uses PyNaCl directly so the SDK is checked against an
independent crypto_box implementation.
"""

import json
import re
import threading

import httpx
import nacl.public
import nacl.utils
import pytest

from tokenvault.client import Client
from tokenvault.common.utils import b64_decode, b64_encode

BASE_URL = "http://tokenvault.test"


class FakeTokenServer:
    def __init__(self, version: str = "v0.2"):
        self.version = version
        self.calls = []
        self.bodies = []
        self.sessions = {}           # (namespace, credential) -> Box
        self.channels = {}           # session id -> Box
        self.stored = {}             # token -> plaintext bytes
        self.staged = {}             # session id -> token
        self.committed = []
        self.client_keys = []        # every client public key seen at begin
        self.tamper_store = None     # optional callable(tokens) -> tokens
        self.tamper_fetch = None     # optional callable(values) -> values
        self._token_seq = 0
        self._session_seq = 0
        self._lock = threading.Lock()

    # -------------------- helpers --------------------

    def _reply(self, status: int = 200, body=None) -> httpx.Response:
        headers = {"X-Tokenvault-Version": self.version}
        if body is None:
            return httpx.Response(status, headers=headers)
        return httpx.Response(status, json=body, headers=headers)

    def _valid(self, credential) -> bool:
        return isinstance(credential, str) and credential.startswith("cred-")

    def _new_box(self, client_public_key_b64: str):
        self.client_keys.append(client_public_key_b64)
        server_sk = nacl.public.PrivateKey.generate()
        client_pk = nacl.public.PublicKey(b64_decode(client_public_key_b64))
        return server_sk, nacl.public.Box(server_sk, client_pk)

    def _open(self, box, full_text: str) -> bytes:
        raw = b64_decode(full_text)
        return box.decrypt(raw[24:], raw[:24])

    def _seal(self, box, plaintext: bytes) -> str:
        nonce = nacl.utils.random(24)
        return b64_encode(nonce + box.encrypt(plaintext, nonce).ciphertext)

    def _next_token(self) -> str:
        self._token_seq += 1
        return f"tok-{self._token_seq}"

    # -------------------- routing --------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            return self._route(request)

    def _route(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        body = json.loads(request.content) if request.content else {}
        self.calls.append(path)
        self.bodies.append(request.content)

        m = re.fullmatch(r"/api/secure/(protection|vault)/(begin|store|fetch)", path)
        if m:
            return self._batch(m.group(1), m.group(2), body)

        if path == "/api/secure-channel/begin":
            return self._channel_begin(body)

        m = re.fullmatch(r"/api/secure-channel/([^/]+)/(insert|commit)", path)
        if m:
            return self._channel_op(m.group(1), m.group(2), body)

        return self._reply(404, {"error": f"no route {path}"})

    def _batch(self, namespace, op, body):
        credential = body.get("credential")
        if not self._valid(credential):
            return self._reply(401, {"error": "invalid credential"})

        if op == "begin":
            server_sk, box = self._new_box(body["client_public_key"])
            self.sessions[(namespace, credential)] = box
            return self._reply(200, {"server_public_key": b64_encode(bytes(server_sk.public_key))})

        box = self.sessions.pop((namespace, credential), None)
        if box is None:
            return self._reply(400, {"error": "begin first"})

        if op == "store":
            tokens = []
            for group in body["values"]:
                row = []
                for full_text in group:
                    token = self._next_token()
                    self.stored[token] = self._open(box, full_text)
                    row.append(token)
                tokens.append(row)
            if self.tamper_store:
                tokens = self.tamper_store(tokens)
            return self._reply(200, {"tokens": tokens})

        values = [[self._seal(box, self.stored[t]) for t in group] for group in body["tokens"]]
        if self.tamper_fetch:
            values = self.tamper_fetch(values)
        return self._reply(200, {"values": values})

    def _channel_begin(self, body):
        if not self._valid(body.get("credential")):
            return self._reply(401, {"error": "invalid credential"})
        self._session_seq += 1
        session_id = f"s{self._session_seq}"
        server_sk, box = self._new_box(body["client_public_key"])
        self.channels[session_id] = box
        return self._reply(200, {"id": session_id, "server_public_key": b64_encode(bytes(server_sk.public_key))})

    def _channel_op(self, session_id, op, body):
        box = self.channels.get(session_id)
        if box is None:
            return self._reply(404, {"error": "session not found"})

        if op == "insert":
            token = self._next_token()
            self.stored[token] = self._open(box, body["data"])
            self.staged[session_id] = token
            return self._reply(200, {"token": token})

        if session_id not in self.staged:
            return self._reply(409, {"error": "nothing to commit"})
        self.committed.append(session_id)
        del self.channels[session_id]
        return self._reply(200)


@pytest.fixture
def server():
    return FakeTokenServer()


@pytest.fixture
def client(server):
    http = httpx.Client(transport=httpx.MockTransport(server.handle))
    with Client(BASE_URL, http_client=http) as c:
        yield c
    http.close()
