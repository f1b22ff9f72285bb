"""cidcodec: content identifiers (CIDv0 / CIDv1).

Build, parse, and render self-describing content identifiers in both their
binary and multibase text forms, including the legacy v0 shape.

Quick start:
    >>> import multihash
    >>> from cidcodec import Cid, RAW
    >>> cid = Cid.new_v1(RAW, multihash.digest(b"foo", "sha2-256"))
    >>> cid.to_string_of_base("base64")
    'mAVUSICwmtGto/8aP+ZtFPB0wQTQTQi1wZIO/oPmKXohiZueu'
    >>> Cid.from_str(str(cid)) == cid
    True

Legacy identifiers parse to V0 and render back unchanged:
    >>> Cid.from_str("QmdfTbBqBPQ7VNxZEYEj14VmRuZBkqFbiwReogJgS1zR1n").version
    <Version.V0: 0>
"""

from __future__ import annotations

from typing import Union

from ._constants import (
    DAG_CBOR,
    DAG_PB,
    DEFAULT_BASE,
    LEGACY_BASE,
    MAX_DIGEST_SIZE,
    RAW,
    SHA2_256,
)
from ._core import BytesLike, Cid, wrap_digest
from ._errors import (
    ERR_INPUT_TOO_SHORT,
    ERR_INVALID_V0_BASE,
    ERR_INVALID_V0_CODEC,
    ERR_INVALID_V0_MULTIHASH,
    ERR_INVALID_VERSION,
    ERR_IO,
    ERR_PARSING,
    ERR_UNKNOWN_CODEC,
    ERR_VARINT_DECODE,
    CidError,
)
from ._json_adapter import dumps_link, from_json_link, loads_link, to_json_link
from ._version import Version, from_code, looks_like_v0, to_code

__version__ = "0.1.0"

__all__ = [
    # Types
    "Cid",
    "Version",
    # Public API functions
    "parse",
    "decode_bytes",
    "encode_bytes",
    "decode_text",
    "encode_text",
    "wrap_digest",
    "from_code",
    "to_code",
    "looks_like_v0",
    # DAG-JSON links
    "to_json_link",
    "from_json_link",
    "dumps_link",
    "loads_link",
    # Constants
    "DAG_PB",
    "DAG_CBOR",
    "RAW",
    "SHA2_256",
    "DEFAULT_BASE",
    "LEGACY_BASE",
    "MAX_DIGEST_SIZE",
    # Exception
    "CidError",
    # Error codes
    "ERR_UNKNOWN_CODEC",
    "ERR_INPUT_TOO_SHORT",
    "ERR_PARSING",
    "ERR_INVALID_VERSION",
    "ERR_INVALID_V0_CODEC",
    "ERR_INVALID_V0_MULTIHASH",
    "ERR_INVALID_V0_BASE",
    "ERR_VARINT_DECODE",
    "ERR_IO",
]


# ── Convenience API ───────────────────────────────────────────

def parse(value: Union[Cid, str, BytesLike]) -> Cid:
    """Parse a CID from text or bytes (a Cid passes through unchanged)."""
    return Cid.try_from(value)


def decode_bytes(data: BytesLike) -> Cid:
    return Cid.from_bytes(data)


def encode_bytes(cid: Cid) -> bytes:
    return cid.to_bytes()


def decode_text(text: str) -> Cid:
    return Cid.from_str(text)


def encode_text(cid: Cid, base: Union[str, None] = None) -> str:
    """Render `cid` as text.

    Without `base` this is the version-appropriate default (base58btc for
    V0, base32 for V1).
    """
    if base is None:
        return str(cid)
    return cid.to_string_of_base(base)
