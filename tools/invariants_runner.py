#!/usr/bin/env python3
# tools/invariants_runner.py
#
# CID round-trip invariants (property tests).
#
# This runner:
# - generates random CIDs (v0 and v1, assorted codecs and hash functions)
# - checks the binary layout against an independent assembly of the fields
# - checks binary and text round-trips and v0 <-> v1 conversion
# - checks that back-to-back binary CIDs read out of one stream in order
#
# Exit code:
#   0 -> all checks passed
#   1 -> invariant violation

import io, os, sys, random
from typing import Any, Dict, List

import multihash
import varint

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from cidcodec import Cid, CidError, Version, DAG_CBOR, DAG_PB, LEGACY_BASE, RAW

SEED = int(os.environ.get("CID_SEED", "1337"))
TRIALS = int(os.environ.get("CID_TRIALS", "2000"))
MAX_DATA = int(os.environ.get("CID_GEN_MAX_DATA", "64"))
STREAM_LEN = int(os.environ.get("CID_GEN_STREAM_LEN", "5"))

random.seed(SEED)

HASH_FUNCS = ["sha2-256", "sha2-512", "sha1", "sha3-256"]
V1_BASES = ["base32", "base32upper", "base58btc", "base64", "base64url", "base16", "base36"]
CODECS = [DAG_PB, RAW, DAG_CBOR, 0x0129, 0x0200, 0x0300]
NON_LEGACY_BASES = [b for b in V1_BASES if b != LEGACY_BASE]


def rand_data() -> bytes:
    return random.randbytes(random.randint(0, MAX_DATA))


def rand_codec() -> int:
    r = random.random()
    if r < 0.8:
        return random.choice(CODECS)
    if r < 0.95:
        return random.randint(0, 0xFFFF)
    return random.randint(0, 2 ** 64 - 1)


def gen_cid() -> Cid:
    data = rand_data()
    if random.random() < 0.3:
        return Cid.new_v0(multihash.digest(data, "sha2-256"))
    return Cid.new_v1(rand_codec(), multihash.digest(data, random.choice(HASH_FUNCS)))


def expected_bytes(cid: Cid) -> bytes:
    mh = varint.encode(cid.hash.code) + varint.encode(len(cid.hash.digest)) + cid.hash.digest
    if cid.version is Version.V0:
        return mh
    return varint.encode(1) + varint.encode(cid.codec) + mh


def fail(label: str, context: Dict[str, Any]) -> None:
    print("INVARIANT FAIL:", label)
    for k, v in context.items():
        print("  {}: {}".format(k, v))
    raise SystemExit(1)


def main() -> int:
    for t in range(TRIALS):
        cid = gen_cid()
        ctx = {"trial": t, "cid": format(cid, "#")}

        # (1) Binary layout matches an independent assembly of the fields
        raw = cid.to_bytes()
        if raw != expected_bytes(cid):
            fail("binary layout", dict(ctx, got=raw.hex(), expected=expected_bytes(cid).hex()))
        if (cid.version is Version.V0) != Version.is_v0_binary(raw):
            fail("v0 binary shape", dict(ctx, got=raw.hex()))

        # (2) Binary round-trip, with and without trailing garbage
        if Cid.from_bytes(raw) != cid:
            fail("binary round-trip", ctx)
        if Cid.from_bytes(raw + random.randbytes(random.randint(1, 8))) != cid:
            fail("binary round-trip with trailing bytes", ctx)

        # (3) Default text round-trip and text stability
        text = str(cid)
        if Cid.from_str(text) != cid or str(Cid.from_str(text)) != text:
            fail("default text round-trip", dict(ctx, text=text))
        if cid.version is Version.V0 and not Version.is_v0_str(text):
            fail("v0 text shape", dict(ctx, text=text))

        # (4) Explicit bases
        if cid.version is Version.V1:
            base = random.choice(V1_BASES)
            other = cid.to_string_of_base(base)
            if Cid.from_str(other) != cid:
                fail("text round-trip in " + base, dict(ctx, text=other))
        else:
            if cid.to_string_of_base(LEGACY_BASE) != text:
                fail("v0 base58btc rendering", dict(ctx, text=text))
            try:
                cid.to_string_of_base(random.choice(NON_LEGACY_BASES))
            except CidError:
                pass
            else:
                fail("v0 accepted a non-base58btc base", ctx)

        # (5) /ipfs/ path prefix is transparent
        if Cid.from_str("/ipfs/" + text) != cid:
            fail("ipfs path prefix", dict(ctx, text=text))

        # (6) v0 <-> v1 conversion preserves the multihash
        if cid.version is Version.V0:
            v1 = cid.to_v1()
            if v1.codec != DAG_PB or v1.hash != cid.hash or v1.to_v0() != cid:
                fail("v0 -> v1 -> v0", ctx)

        # (7) Equality agrees with encoded bytes and with ordering
        twin = Cid.from_bytes(raw)
        if hash(twin) != hash(cid) or twin < cid or cid < twin:
            fail("equality / hash / order consistency", ctx)

    # (8) Back-to-back CIDs in one stream
    for t in range(max(1, TRIALS // 10)):
        cids: List[Cid] = [gen_cid() for _ in range(random.randint(1, STREAM_LEN))]
        stream = io.BytesIO(b"".join(c.to_bytes() for c in cids))
        got = [Cid.read_bytes(stream) for _ in cids]
        if got != cids or stream.read() != b"":
            fail("stream sequence", {"trial": t, "cids": [str(c) for c in cids]})

    print(f"OK: invariants passed for TRIALS={TRIALS} seed={SEED}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
