"""CID construction, binary read/write, and text encode/decode.

A CID is the triple (version, codec, multihash):

    V0  binary  [0x12][0x20][32 digest bytes]            (the multihash alone)
        text    base58btc(binary), no multibase marker    ("Qm...")
    V1  binary  varint(1) || varint(codec) || multihash
        text    multibase(base, binary), base32 default  ("b...")

Binary CIDs are not self-delimiting: a reader consumes exactly one CID from
the stream and leaves the rest alone.  Text decoding always funnels into
the binary reader, so both paths share one set of validity rules.

The multihash container, varints, and the base encodings are delegated to
py-multihash, varint, py-multibase, and base58 respectively.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from functools import total_ordering
from typing import Any, BinaryIO, Dict, Tuple, Union

import base58
import multibase
import multihash
import varint
from multihash import Multihash
from multihash.constants import CODE_HASHES

from ._constants import (
    DAG_PB,
    DEFAULT_BASE,
    IPFS_DELIMITER,
    LEGACY_BASE,
    MAX_DIGEST_SIZE,
    MAX_VARINT_LEN,
    MIN_TEXT_LEN,
    SHA2_256,
    SHA2_256_LEN,
    U64_MAX,
)
from ._errors import (
    ERR_INPUT_TOO_SHORT,
    ERR_INVALID_V0_BASE,
    ERR_INVALID_V0_CODEC,
    ERR_INVALID_V0_MULTIHASH,
    ERR_VARINT_DECODE,
    CidError,
    from_io_error,
    from_multibase_error,
    from_multihash_error,
    from_varint_error,
)
from ._version import Version

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]
_BYTES_LIKE = (bytes, bytearray, memoryview)


# ── Multihash helpers ─────────────────────────────────────────

def wrap_digest(code: int, digest: BytesLike) -> Multihash:
    """Wrap raw digest bytes in a multihash tagged with `code`."""
    try:
        return multihash.decode(multihash.encode(bytes(digest), code))
    except (TypeError, ValueError) as exc:
        raise from_multihash_error(exc) from exc


def _coerce_multihash(value: Union[Multihash, BytesLike]) -> Multihash:
    if isinstance(value, Multihash):
        return value
    if isinstance(value, _BYTES_LIKE):
        try:
            return multihash.decode(bytes(value))
        except (TypeError, ValueError) as exc:
            raise from_multihash_error(exc) from exc
    raise TypeError(
        "expected a Multihash or its binary encoding, got {}".format(type(value).__name__))


def _check_codec(codec: Any) -> None:
    # bool before int: True is not a content-type code.
    if isinstance(codec, bool) or not isinstance(codec, int):
        raise TypeError("codec must be an int, got {}".format(type(codec).__name__))
    if codec < 0 or codec > U64_MAX:
        raise ValueError("codec {} outside unsigned 64-bit range".format(codec))


# ── Stream primitives ─────────────────────────────────────────
# Varints are read a byte at a time so the encoding itself can be checked:
# at most 10 bytes, and no trailing 0x00 after a continuation byte.

def _read_byte(stream: BinaryIO) -> int:
    try:
        data = stream.read(1)
    except OSError as exc:
        raise from_io_error(exc) from exc
    if not data:
        raise CidError(ERR_VARINT_DECODE, "unexpected end of input inside varint")
    return data[0]


def _read_varint(stream: BinaryIO) -> int:
    raw = bytearray()
    while True:
        byte = _read_byte(stream)
        raw.append(byte)
        if not byte & 0x80:
            break
        if len(raw) >= MAX_VARINT_LEN:
            raise CidError(ERR_VARINT_DECODE, "varint overflows 64 bits")
    if len(raw) > 1 and raw[-1] == 0:
        raise CidError(ERR_VARINT_DECODE, "varint is not minimally encoded")
    try:
        value = varint.decode_bytes(bytes(raw))
    except (EOFError, TypeError, ValueError) as exc:
        raise from_varint_error(exc) from exc
    if value > U64_MAX:
        raise CidError(ERR_VARINT_DECODE, "varint overflows 64 bits")
    return value


def _read_exact(stream: BinaryIO, n: int) -> bytes:
    try:
        data = stream.read(n)
    except OSError as exc:
        raise from_io_error(exc) from exc
    if data is None or len(data) != n:
        got = 0 if data is None else len(data)
        raise CidError(ERR_VARINT_DECODE,
                       "expected {} digest bytes, got {}".format(n, got))
    return bytes(data)


def _read_multihash(stream: BinaryIO) -> Multihash:
    code = _read_varint(stream)
    if not multihash.is_valid_code(code):
        raise CidError(ERR_VARINT_DECODE, "unsupported multihash code {:#x}".format(code))
    length = _read_varint(stream)
    if length > MAX_DIGEST_SIZE:
        raise CidError(ERR_VARINT_DECODE,
                       "digest of {} bytes exceeds {}-byte limit".format(length, MAX_DIGEST_SIZE))
    digest = _read_exact(stream, length)
    return Multihash(code=code, name=CODE_HASHES.get(code, code), length=length, digest=digest)


def _write(stream: BinaryIO, data: bytes) -> int:
    try:
        stream.write(data)
    except OSError as exc:
        raise from_io_error(exc) from exc
    return len(data)


# ── Cid ───────────────────────────────────────────────────────

@total_ordering
@dataclass(frozen=True, repr=False)
class Cid:
    """A content identifier.

    Instances are immutable.  The v0 invariants (dag-pb codec, 32-byte
    SHA2-256 multihash) are checked on every construction path, so a v0
    Cid that violates them cannot exist.  Equality and hashing are over
    (version, codec, hash).
    """

    version: Version
    codec: int
    hash: Multihash

    def __post_init__(self) -> None:
        if not isinstance(self.version, Version):
            object.__setattr__(self, "version", Version.from_code(self.version))
        _check_codec(self.codec)
        if not isinstance(self.hash, Multihash):
            raise TypeError("hash must be a Multihash, got {}".format(type(self.hash).__name__))
        if self.version is Version.V0:
            if self.codec != DAG_PB:
                raise CidError(ERR_INVALID_V0_CODEC)
            if self.hash.code != SHA2_256 or self.hash.length != SHA2_256_LEN:
                raise CidError(ERR_INVALID_V0_MULTIHASH)

    # ── Construction ─────────────────────────────────────────

    @classmethod
    def new_v0(cls, hash: Union[Multihash, BytesLike]) -> "Cid":
        """Create a CIDv0.  The codec is always dag-pb."""
        return cls(Version.V0, DAG_PB, _coerce_multihash(hash))

    @classmethod
    def new_v1(cls, codec: int, hash: Union[Multihash, BytesLike]) -> "Cid":
        """Create a CIDv1."""
        return cls(Version.V1, codec, _coerce_multihash(hash))

    @classmethod
    def new(cls, version: Union[Version, int], codec: int,
            hash: Union[Multihash, BytesLike]) -> "Cid":
        """Create a CID of the given version.

        For V0 the codec must be dag-pb; that is checked before the multihash.
        """
        version = Version.from_code(version) if not isinstance(version, Version) else version
        if version is Version.V0:
            if codec != DAG_PB:
                raise CidError(ERR_INVALID_V0_CODEC)
            return cls.new_v0(hash)
        return cls.new_v1(codec, hash)

    # ── Binary ────────────────────────────────────────────────

    @classmethod
    def read_bytes(cls, stream: BinaryIO) -> "Cid":
        """Read one CID from a binary stream.

        The stream is left positioned immediately after the CID.
        """
        first = _read_varint(stream)
        second = _read_varint(stream)

        # The legacy multihash prefix wins over any v1 reading: 0x12 is
        # never a valid version number.
        if (first, second) == (SHA2_256, SHA2_256_LEN):
            digest = _read_exact(stream, SHA2_256_LEN)
            return cls.new_v0(wrap_digest(SHA2_256, digest))

        version = Version.from_code(first)
        mh = _read_multihash(stream)
        return cls.new(version, second, mh)

    @classmethod
    def from_bytes(cls, data: BytesLike) -> "Cid":
        """Decode a CID from the front of `data`.  Trailing bytes are ignored."""
        if not isinstance(data, _BYTES_LIKE):
            raise TypeError("expected bytes-like, got {}".format(type(data).__name__))
        try:
            return cls.read_bytes(io.BytesIO(bytes(data)))
        except CidError as exc:
            logger.debug({"msg": "Failed to decode binary CID.", "code": exc.code, "error": str(exc)})
            raise

    def write_bytes(self, stream: BinaryIO) -> int:
        """Write the binary form to `stream`.  Returns the number of bytes written."""
        written = 0
        if self.version is Version.V1:
            prefix = varint.encode(self.version.to_code()) + varint.encode(self.codec)
            written += _write(stream, prefix)
        written += _write(stream, self.hash.encode())
        return written

    def to_bytes(self) -> bytes:
        buf = io.BytesIO()
        self.write_bytes(buf)
        return buf.getvalue()

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    # ── Text ─────────────────────────────────────────────────

    def _to_string_v0(self) -> str:
        return base58.b58encode(self.hash.encode()).decode("ascii")

    def _to_string_v1(self, base: str = DEFAULT_BASE) -> str:
        try:
            encoded = multibase.encode(base, self.to_bytes())
        except ValueError as exc:
            raise from_multibase_error(exc) from exc
        return encoded.decode("utf-8")

    def to_string_of_base(self, base: str) -> str:
        """Render with an explicit multibase (e.g. "base64", "base58btc").

        V0 has no multibase marker, so only base58btc is accepted for it.
        """
        if self.version is Version.V0:
            if base != LEGACY_BASE:
                raise CidError(ERR_INVALID_V0_BASE,
                               "CIDv0 requires a Base58 base, got {!r}".format(base))
            return self._to_string_v0()
        return self._to_string_v1(base)

    @classmethod
    def from_str(cls, text: str) -> "Cid":
        """Parse a text CID.

        Accepts a bare CID or anything containing "/ipfs/<cid>"; everything
        up to and including the first "/ipfs/" is dropped.
        """
        if not isinstance(text, str):
            raise TypeError("expected str, got {}".format(type(text).__name__))

        index = text.find(IPFS_DELIMITER)
        if index != -1:
            text = text[index + len(IPFS_DELIMITER):]

        if len(text) < MIN_TEXT_LEN:
            raise CidError(ERR_INPUT_TOO_SHORT)

        if Version.is_v0_str(text):
            try:
                decoded = base58.b58decode(text)
            except ValueError as exc:
                logger.debug({"msg": "Failed to decode legacy CID text.", "error": str(exc)})
                raise from_multibase_error(exc) from exc
        else:
            try:
                _base, decoded = multibase.decode(text, return_encoding=True)
            except ValueError as exc:
                logger.debug({"msg": "Failed to decode multibase CID text.", "error": str(exc)})
                raise from_varint_error(exc) from exc

        return cls.from_bytes(decoded)

    @classmethod
    def try_from(cls, value: Union["Cid", str, BytesLike]) -> "Cid":
        """Build a Cid from a Cid, a text CID, or a binary CID."""
        if isinstance(value, Cid):
            return value
        if isinstance(value, str):
            return cls.from_str(value)
        if isinstance(value, _BYTES_LIKE):
            return cls.from_bytes(value)
        raise TypeError("cannot build a Cid from {}".format(type(value).__name__))

    def __str__(self) -> str:
        if self.version is Version.V0:
            return self._to_string_v0()
        return self._to_string_v1()

    def __repr__(self) -> str:
        return "Cid({})".format(self)

    def __format__(self, format_spec: str) -> str:
        # "#" selects the verbose field-by-field rendering.
        if format_spec == "#":
            return ("Cid(version={}, codec={}, hash=Multihash(code={}, size={}, digest={}))"
                    .format(self.version.name, self.codec, self.hash.code,
                            self.hash.length, self.hash.digest.hex()))
        return format(str(self), format_spec)

    def describe(self) -> Dict[str, Any]:
        return {
            "version": self.version.name,
            "codec": self.codec,
            "hash": {
                "code": self.hash.code,
                "size": self.hash.length,
                "digest": self.hash.digest.hex(),
            },
        }

    # ── Version conversion ───────────────────────────────────

    def to_v1(self) -> "Cid":
        if self.version is Version.V1:
            return self
        return Cid.new_v1(self.codec, self.hash)

    def to_v0(self) -> "Cid":
        if self.version is Version.V0:
            return self
        return Cid.new(Version.V0, self.codec, self.hash)

    # ── Ordering ─────────────────────────────────────────────

    def _sort_key(self) -> Tuple[int, int, int, int, bytes]:
        return (self.version.to_code(), self.codec,
                self.hash.code, self.hash.length, bytes(self.hash.digest))

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Cid):
            return NotImplemented
        return self._sort_key() < other._sort_key()
