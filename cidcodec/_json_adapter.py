"""IPLD DAG-JSON link form for CIDs.

A link is a JSON object with exactly one key, "/", whose value is the
CID's default text form:

    {"/": "bafyreibjo4xmgaevkgud7mbifn3dzp4v4lyaui4yvqp3f2bqwtxcjrdqg4"}

Parsing is strict.  Duplicate keys are detected at the token level (Python's
json.loads would otherwise keep the last one silently), and anything that is
not exactly a one-key link object is rejected with ERR_PARSING.  The inner
string goes through Cid.try_from, so text errors keep their own codes.
"""

from __future__ import annotations

import json
from typing import Any, Dict

from ._core import Cid
from ._errors import ERR_PARSING, CidError

LINK_KEY = "/"


def to_json_link(cid: Cid) -> Dict[str, str]:
    return {LINK_KEY: str(cid)}


def from_json_link(obj: Any) -> Cid:
    """Build a Cid from an already-parsed link object."""
    if not isinstance(obj, dict):
        raise CidError(ERR_PARSING, "link must be a JSON object")
    if list(obj.keys()) != [LINK_KEY]:
        raise CidError(ERR_PARSING, "link object must have exactly one key '/'")
    text = obj[LINK_KEY]
    if not isinstance(text, str):
        raise CidError(ERR_PARSING, "link value must be a string")
    return Cid.try_from(text)


def dumps_link(cid: Cid) -> bytes:
    """Serialize a Cid as compact UTF-8 DAG-JSON link bytes."""
    return json.dumps(to_json_link(cid), separators=(",", ":")).encode("utf-8")


def _pairs_hook(pairs: list) -> dict:
    result: dict = {}
    for key, value in pairs:
        if key in result:
            raise CidError(ERR_PARSING, "duplicate key {!r} in link".format(key))
        result[key] = value
    return result


def loads_link(raw: bytes) -> Cid:
    """Parse UTF-8 DAG-JSON link bytes into a Cid."""
    if not isinstance(raw, (bytes, bytearray, memoryview)):
        raise TypeError("expected bytes-like, got {}".format(type(raw).__name__))
    try:
        text = bytes(raw).decode("utf-8")
    except UnicodeDecodeError:
        raise CidError(ERR_PARSING, "invalid UTF-8 in link") from None

    try:
        obj = json.loads(text, object_pairs_hook=_pairs_hook)
    except CidError:
        raise
    except json.JSONDecodeError as exc:
        raise CidError(ERR_PARSING, "JSON parse error: {}".format(exc.msg)) from exc
    except RecursionError:
        # A link is one flat object; deep nesting is never valid.
        raise CidError(ERR_PARSING, "JSON nesting too deep") from None
    return from_json_link(obj)
