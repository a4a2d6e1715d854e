"""Common helpers: base64, canonical JSON encoding, batch shapes."""

import base64
import binascii
import json
from typing import Any, List, Optional, Sequence, Tuple


def b64_encode(data: bytes) -> str:
    """
    Base64-encode bytes -> str (ASCII).
    """
    return base64.b64encode(data).decode("ascii")


def b64_decode(s: str) -> bytes:
    """
    Base64-decode str -> bytes.

    Raises ValueError on non-ASCII input or bad padding/alphabet.
    """
    try:
        return base64.b64decode(s.encode("ascii"), validate=True)
    except (UnicodeEncodeError, binascii.Error) as e:
        raise ValueError(f"invalid base64: {e}") from e


def encode_value(value: Any) -> bytes:
    """
    Canonical plaintext encoding: compact JSON, UTF-8.

    Raises TypeError if the value is not JSON-serializable.
    """
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def decode_value(data: bytes) -> Any:
    """Inverse of encode_value."""
    return json.loads(data.decode("utf-8"))


def shape_of(groups: Sequence[Sequence[Any]]) -> Tuple[int, ...]:
    """Group lengths, e.g. [[a, b], [c]] -> (2, 1)."""
    return tuple(len(group) for group in groups)


def ensure_groups(groups: Any, what: str = "values", item_type: Optional[type] = None) -> List[List[Any]]:
    """
    Check that `groups` is a list of lists and return it as such.

    With `item_type`, every item must also be an instance of it.
    """
    if not isinstance(groups, (list, tuple)):
        raise TypeError(f"{what} must be a list of lists, got {type(groups).__name__}")
    out = []
    for i, group in enumerate(groups):
        if not isinstance(group, (list, tuple)):
            raise TypeError(f"{what}[{i}] must be a list, got {type(group).__name__}")
        if item_type is not None:
            for j, item in enumerate(group):
                if not isinstance(item, item_type):
                    raise TypeError(
                        f"{what}[{i}][{j}] must be {item_type.__name__}, got {type(item).__name__}"
                    )
        out.append(list(group))
    return out
