"""CID error codes, exception class, and collaborator error conversion.

Every failure is classified exactly once, at the boundary where it happens,
and surfaces as a CidError whose `.code` is one of the ERR_* strings below.
Nothing is retried; there are no partial results.
"""

from __future__ import annotations

from typing import Dict

# ── Error codes ──────────────────────────────────────────────

ERR_UNKNOWN_CODEC: str = "ERR_UNKNOWN_CODEC"                # reserved for codec-table callers
ERR_INPUT_TOO_SHORT: str = "ERR_INPUT_TOO_SHORT"            # text shorter than 2 chars
ERR_PARSING: str = "ERR_PARSING"                            # base58 / multibase / multihash layer
ERR_INVALID_VERSION: str = "ERR_INVALID_VERSION"            # version outside {0, 1}
ERR_INVALID_V0_CODEC: str = "ERR_INVALID_V0_CODEC"          # v0 with codec != dag-pb
ERR_INVALID_V0_MULTIHASH: str = "ERR_INVALID_V0_MULTIHASH"  # v0 with hash != sha2-256
ERR_INVALID_V0_BASE: str = "ERR_INVALID_V0_BASE"            # v0 rendered in a non-base58btc base
ERR_VARINT_DECODE: str = "ERR_VARINT_DECODE"                # malformed/truncated varint or digest
ERR_IO: str = "ERR_IO"                                      # underlying stream failure

MESSAGES: Dict[str, str] = {
    ERR_UNKNOWN_CODEC: "Unknown codec",
    ERR_INPUT_TOO_SHORT: "Input too short",
    ERR_PARSING: "Failed to parse multihash",
    ERR_INVALID_VERSION: "Unrecognized CID version",
    ERR_INVALID_V0_CODEC: "CIDv0 requires a DagPB codec",
    ERR_INVALID_V0_MULTIHASH: "CIDv0 requires a Sha-256 multihash",
    ERR_INVALID_V0_BASE: "CIDv0 requires a Base58 base",
    ERR_VARINT_DECODE: "Failed to decode unsigned varint format",
    ERR_IO: "I/O error",
}


class CidError(Exception):
    """Exception for CID construction, encoding, and decoding errors.

    The `.code` attribute is one of the ERR_* strings above and is what
    callers (and the conformance suite) compare against.
    """

    def __init__(self, code: str, msg: str = "") -> None:
        super().__init__(msg or MESSAGES.get(code, code))
        self.code = code


# ── Collaborator error conversion ────────────────────────────
# One function per collaborator.  Callers use them as
#     raise from_xxx_error(exc) from exc
# so the original exception stays attached as __cause__.

def from_multibase_error(exc: Exception) -> CidError:
    """base58 / multibase decode or encode failure."""
    return CidError(ERR_PARSING, "{}: {}".format(MESSAGES[ERR_PARSING], exc))


def from_multihash_error(exc: Exception) -> CidError:
    """Multihash-layer decode failure on an explicitly supplied multihash."""
    return CidError(ERR_PARSING, "{}: {}".format(MESSAGES[ERR_PARSING], exc))


def from_varint_error(exc: Exception) -> CidError:
    """Malformed varint, or the stream ended before a field was complete."""
    return CidError(ERR_VARINT_DECODE, "{}: {}".format(MESSAGES[ERR_VARINT_DECODE], exc))


def from_io_error(exc: OSError) -> CidError:
    return CidError(ERR_IO, str(exc) or MESSAGES[ERR_IO])
