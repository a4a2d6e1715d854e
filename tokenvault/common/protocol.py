"""
Pydantic message models for the tokenization protocol.
These are the ONLY structures exchanged between the SDK and the servers.
"""

from typing import List, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError

from tokenvault.common.errors import ProtocolError

M = TypeVar("M", bound=BaseModel)


def parse_response(model: Type[M], data: dict, what: str) -> M:
    """Validate a response body, turning pydantic errors into ProtocolError."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ProtocolError(f"malformed {what} response: {e.error_count()} invalid field(s)") from e


# -------------------------
# Handshake
# -------------------------

class BeginRequest(BaseModel):
    credential: str
    client_public_key: str   # base64, 32 bytes


class BeginResponse(BaseModel):
    server_public_key: str   # base64, 32 bytes


class ChannelBeginResponse(BaseModel):
    id: str = Field(min_length=1)
    server_public_key: str


# -------------------------
# Batch store / fetch
# -------------------------

class StoreRequest(BaseModel):
    credential: str
    values: List[List[str]]  # FullTexts


class StoreResponse(BaseModel):
    tokens: List[List[str]]


class FetchRequest(BaseModel):
    credential: str
    tokens: List[List[str]]


class FetchResponse(BaseModel):
    values: List[List[str]]  # FullTexts


# -------------------------
# Legacy secure channel
# -------------------------

class ChannelInsertRequest(BaseModel):
    credential: str
    data: str                # FullText


class ChannelInsertResponse(BaseModel):
    token: str


# -------------------------
# Application backend: credential issuance
# -------------------------

class CredentialResponse(BaseModel):
    credential: str
