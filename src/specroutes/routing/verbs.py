from __future__ import annotations

from enum import Enum


class CanonicalMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    # wildcard "every method"; also what unknown verbs resolve to
    ANY = "ANY"


CONCRETE_METHODS: tuple[CanonicalMethod, ...] = tuple(
    m for m in CanonicalMethod if m is not CanonicalMethod.ANY
)

_BY_NAME = {m.value: m for m in CONCRETE_METHODS}


def resolve_verb(token: str) -> CanonicalMethod:
    """
    Map a free-form verb token to a CanonicalMethod.

    Case-insensitive. Anything outside GET/POST/PUT/DELETE/PATCH/HEAD
    (OPTIONS, TRACE, "", typos) resolves to ANY. Never raises.
    """
    if not isinstance(token, str):
        return CanonicalMethod.ANY
    return _BY_NAME.get(token.upper(), CanonicalMethod.ANY)
