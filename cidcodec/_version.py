"""CID version model.

Two versions exist.  V0 is the legacy shape (bare base58btc SHA2-256
multihash); V1 carries an explicit version and content-type prefix.
"""

from __future__ import annotations

from enum import IntEnum

from ._constants import (
    LEGACY_BINARY_LEN,
    LEGACY_PREFIX,
    LEGACY_TEXT_LEN,
    LEGACY_TEXT_PREFIX,
)
from ._errors import ERR_INVALID_VERSION, CidError


class Version(IntEnum):
    V0 = 0
    V1 = 1

    @classmethod
    def from_code(cls, code: int) -> "Version":
        """Map a decoded version number to a Version, rejecting anything else."""
        # bool is an int subclass; True must not sneak in as V1.
        if isinstance(code, bool) or not isinstance(code, int):
            raise CidError(ERR_INVALID_VERSION,
                           "unrecognized CID version {!r}".format(code))
        try:
            return cls(code)
        except ValueError:
            raise CidError(ERR_INVALID_VERSION,
                           "unrecognized CID version {}".format(code)) from None

    def to_code(self) -> int:
        return int(self.value)

    @staticmethod
    def is_v0_str(data: str) -> bool:
        """True if `data` has the legacy text shape.

        Only the shape is checked (fixed length, "Qm" prefix).  Whether the
        characters are valid base58btc is left to the decoder, so a malformed
        legacy-looking string fails as a parsing error rather than being
        re-routed to the multibase path.
        """
        return len(data) == LEGACY_TEXT_LEN and data.startswith(LEGACY_TEXT_PREFIX)

    @staticmethod
    def is_v0_binary(data: bytes) -> bool:
        """True if `data` is exactly a legacy binary CID (0x12 0x20 + 32 bytes)."""
        return len(data) == LEGACY_BINARY_LEN and bytes(data[:2]) == LEGACY_PREFIX


def from_code(code: int) -> Version:
    return Version.from_code(code)


def to_code(version: Version) -> int:
    return version.to_code()


def looks_like_v0(text: str) -> bool:
    return Version.is_v0_str(text)
