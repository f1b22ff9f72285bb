"""Multicodec codes, legacy framing, and defaults for CIDs.

The legacy (v0) shape is fixed: a SHA2-256 multihash with a 32-byte digest,
rendered in base58btc with no multibase marker.  Everything else is v1.
"""

from __future__ import annotations

# ── Multicodec codes ──────────────────────────────────────────
# DAG_PB is a content-type code; SHA2_256 is a hash-function code.
# They live in different tables and must not be confused.
DAG_PB: int = 0x70
RAW: int = 0x55
DAG_CBOR: int = 0x71
SHA2_256: int = 0x12

# ── Legacy (v0) framing ──────────────────────────────────────
# Binary v0 is exactly [0x12][0x20][32 digest bytes].
SHA2_256_LEN: int = 0x20
LEGACY_PREFIX: bytes = bytes([SHA2_256, SHA2_256_LEN])
LEGACY_BINARY_LEN: int = len(LEGACY_PREFIX) + SHA2_256_LEN  # 34

# base58btc of a 34-byte 0x1220 buffer always starts "Qm" and is 46 chars.
LEGACY_TEXT_PREFIX: str = "Qm"
LEGACY_TEXT_LEN: int = 46

# ── Text forms ───────────────────────────────────────────────
DEFAULT_BASE: str = "base32"
LEGACY_BASE: str = "base58btc"
IPFS_DELIMITER: str = "/ipfs/"
MIN_TEXT_LEN: int = 2

# ── Limits ───────────────────────────────────────────────────
# Largest digest accepted when reading a multihash from bytes.
MAX_DIGEST_SIZE: int = 64
U64_MAX: int = 2**64 - 1
# A u64 needs at most ceil(64 / 7) varint bytes.
MAX_VARINT_LEN: int = 10
