from __future__ import annotations

from typing import Iterable, List

import base58

from .errors import InvalidAddress

ADDRESS_LEN = 32


def normalize_address(address: str) -> str:
    """
    Participants are identified by base58-encoded 32-byte public keys.
    Returns the canonical encoding (surrounding whitespace stripped, re-encoded
    from the decoded bytes so equal keys compare equal).
    """
    if not isinstance(address, str):
        raise InvalidAddress(f"address must be a string, got {type(address).__name__}")
    raw = address.strip()
    if not raw:
        raise InvalidAddress("address must not be empty")
    try:
        decoded = base58.b58decode(raw)
    except ValueError as e:
        raise InvalidAddress(f"address is not base58: {raw!r} ({e})")
    if len(decoded) != ADDRESS_LEN:
        raise InvalidAddress(
            f"address must decode to {ADDRESS_LEN} bytes, got {len(decoded)}: {raw!r}"
        )
    return base58.b58encode(decoded).decode("ascii")


def address_from_bytes(key: bytes) -> str:
    if len(key) != ADDRESS_LEN:
        raise InvalidAddress(f"public key must be {ADDRESS_LEN} bytes, got {len(key)}")
    return base58.b58encode(key).decode("ascii")


def load_addresses(lines: Iterable[str]) -> List[str]:
    """Parse one address per line, skipping blanks and ``#`` comments. Order is kept."""
    out: List[str] = []
    for line in lines:
        w = line.strip()
        if not w or w.startswith("#"):
            continue
        out.append(normalize_address(w))
    return out
