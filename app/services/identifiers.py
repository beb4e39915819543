"""Record identifier validation and generation.

Identifiers follow the ObjectId textual form: 24 hexadecimal characters,
the first eight encoding the creation time in seconds.
"""

import os
import re
import time

from app.core.errors import InvalidIdentifierError

ID_LENGTH = 24

_ID_PATTERN = re.compile(r"[0-9a-fA-F]{24}")


def is_valid_id(raw: object) -> bool:
    """Return True only if ``raw`` is a well-formed record identifier."""
    return isinstance(raw, str) and _ID_PATTERN.fullmatch(raw) is not None


def require_valid_id(raw: object, label: str = "ID") -> str:
    """Return the normalized identifier or raise ``InvalidIdentifierError``."""
    if not is_valid_id(raw):
        raise InvalidIdentifierError(raw, label)
    return raw.lower()  # type: ignore[union-attr]


def new_id() -> str:
    """Mint a fresh identifier: 4-byte timestamp followed by 8 random bytes."""
    timestamp = int(time.time()) & 0xFFFFFFFF
    return f"{timestamp:08x}{os.urandom(8).hex()}"
