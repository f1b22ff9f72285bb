#!/usr/bin/env python3
# tools/fuzz_runner.py
#
# CID decoder fuzzing.
#
# Generates three fuzz categories:
#   A) random byte strings and mutated binary CIDs -> Cid.from_bytes
#   B) random texts and mutated text CIDs -> Cid.from_str
#   C) random DAG-JSON link payloads (including deep nesting) -> loads_link
#
# Every input must either decode to a CID that survives a binary
# round-trip, or fail with CidError.  Anything else prints a repro
# payload and exits non-zero.

import os, sys, json, base64, random, traceback
from typing import Any, Callable, Dict

import multihash

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from cidcodec import Cid, CidError, DAG_PB, RAW, loads_link

SEED = int(os.environ.get("CID_SEED", "4242"))
ROUNDS = int(os.environ.get("CID_FUZZ_ROUNDS", "5000"))

random.seed(SEED)

B58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
PREFIXES = ["b", "B", "z", "m", "u", "f", "k", "Qm", "/ipfs/", ""]


def b64(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")


def crash(label: str, exc: BaseException, ctx: Dict[str, Any]) -> None:
    print("CRASH:", label)
    print("EXC :", "".join(traceback.format_exception_only(type(exc), exc)).strip())
    print("CTX:", json.dumps(ctx, ensure_ascii=False)[:4000])
    raise SystemExit(1)


def check(label: str, fn: Callable[[], Cid], ctx: Dict[str, Any]) -> None:
    try:
        cid = fn()
    except CidError:
        return
    except Exception as exc:
        crash(label, exc, ctx)
    try:
        again = Cid.from_bytes(cid.to_bytes())
    except Exception as exc:
        crash(label + " (re-decode)", exc, ctx)
    if again != cid:
        print("MISMATCH:", label)
        print("CTX:", json.dumps(ctx, ensure_ascii=False)[:4000])
        raise SystemExit(1)

# --- generators ---

def rand_ascii(nmax: int) -> str:
    n = random.randint(0, nmax)
    return "".join(chr(random.randint(0x20, 0x7E)) for _ in range(n))


def seed_cid() -> Cid:
    mh = multihash.digest(random.randbytes(random.randint(0, 16)), "sha2-256")
    if random.random() < 0.4:
        return Cid.new_v0(mh)
    return Cid.new_v1(random.choice([DAG_PB, RAW, random.randint(0, 0xFFFF)]), mh)


def mutate(data: bytes) -> bytes:
    buf = bytearray(data)
    for _ in range(random.randint(1, 4)):
        op = random.random()
        if op < 0.4 and buf:
            buf[random.randrange(len(buf))] = random.randint(0, 255)
        elif op < 0.7 and buf:
            del buf[random.randrange(len(buf)):]
        else:
            buf.insert(random.randint(0, len(buf)), random.randint(0, 255))
    return bytes(buf)


def mutate_text(text: str) -> str:
    chars = list(text)
    for _ in range(random.randint(1, 3)):
        op = random.random()
        if op < 0.5 and chars:
            chars[random.randrange(len(chars))] = random.choice(B58_ALPHABET + "!/=-_+")
        elif op < 0.75 and chars:
            del chars[random.randrange(len(chars))]
        else:
            chars.insert(random.randint(0, len(chars)), random.choice(B58_ALPHABET))
    return "".join(chars)


def rand_bytes_input() -> bytes:
    r = random.random()
    if r < 0.5:
        return mutate(seed_cid().to_bytes())
    if r < 0.7:
        return bytes([0x12, 0x20]) + random.randbytes(random.randint(0, 40))
    return random.randbytes(random.randint(0, 48))


def rand_text_input() -> str:
    r = random.random()
    if r < 0.5:
        cid = seed_cid()
        text = str(cid) if random.random() < 0.5 else cid.to_v1().to_string_of_base(
            random.choice(["base58btc", "base64", "base16", "base36"]))
        return mutate_text(text)
    if r < 0.7:
        return "Qm" + "".join(random.choice(B58_ALPHABET) for _ in range(44))
    return random.choice(PREFIXES) + rand_ascii(60)


def rand_link_input() -> bytes:
    r = random.random()
    if r < 0.35:
        return json.dumps({"/": mutate_text(str(seed_cid()))}).encode("utf-8")
    if r < 0.5:
        return b'{"/":"' + str(seed_cid()).encode("ascii") + b'","/":"x"}'
    if r < 0.7:
        return mutate(json.dumps({"/": str(seed_cid())}).encode("utf-8"))
    if r < 0.8:
        opener = random.choice([b"[", b'{"/":'])
        return opener * random.randint(1000, 200000)
    return rand_ascii(40).encode("utf-8")


def main() -> int:
    for i in range(ROUNDS):
        r = random.random()

        # A) binary decoding
        if r < 0.45:
            raw = rand_bytes_input()
            check("A from_bytes", lambda: Cid.from_bytes(raw), {"round": i, "input_b64": b64(raw)})
            continue

        # B) text decoding
        if r < 0.85:
            text = rand_text_input()
            check("B from_str", lambda: Cid.from_str(text), {"round": i, "input": text})
            continue

        # C) DAG-JSON links
        raw = rand_link_input()
        check("C loads_link", lambda: loads_link(raw), {"round": i, "input_b64": b64(raw)})
        if random.random() < 0.05:
            try:
                loads_link(raw.decode("utf-8", "replace"))
            except TypeError:
                pass
            except Exception as exc:
                crash("C loads_link(str)", exc, {"round": i, "input_b64": b64(raw)})
            else:
                print("MISMATCH: C loads_link accepted str input")
                raise SystemExit(1)

    print(f"OK: fuzz rounds={ROUNDS} seed={SEED} (no crashes)")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
