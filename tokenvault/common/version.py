"""Protocol-version check applied to every tokenization-service response."""

import re
from typing import Optional, Tuple

from tokenvault.common.errors import VersionMismatchError

PROTOCOL_VERSION = "v0.2"
# Unversioned/bootstrap servers report this and are treated as compatible.
BOOTSTRAP_VERSION = "v0.0"
VERSION_HEADER = "x-tokenvault-version"

_VERSION_RE = re.compile(r"^v(\d+)\.(\d+)(?:\.(\d+))?$")


def parse_version(version: str) -> Optional[Tuple[int, int]]:
    """
    "v0.2" / "v0.2.7" -> (0, 2). Returns None if unparseable.
    """
    m = _VERSION_RE.match(version.strip())
    if not m:
        return None
    return int(m.group(1)), int(m.group(2))


class VersionGuard:
    """
    Accepts any version with the same major.minor as `accepted`,
    plus the bootstrap version.
    """

    def __init__(self, accepted: str = PROTOCOL_VERSION, header: str = VERSION_HEADER):
        parsed = parse_version(accepted)
        if parsed is None:
            raise ValueError(f"invalid accepted version: {accepted!r}")
        self.accepted = accepted
        self.header = header.lower()
        self._accepted = parsed

    def is_compatible(self, actual: Optional[str]) -> bool:
        if not actual:
            return False
        if actual.strip() == BOOTSTRAP_VERSION:
            return True
        return parse_version(actual) == self._accepted

    def check(self, actual: Optional[str]) -> None:
        """Raise VersionMismatchError unless `actual` is compatible."""
        if not self.is_compatible(actual):
            raise VersionMismatchError(self.accepted, actual)

    def check_headers(self, headers) -> None:
        """`headers` must already have lower-cased names."""
        self.check(headers.get(self.header))
