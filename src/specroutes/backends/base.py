from __future__ import annotations

import re
from typing import AbstractSet, Optional, Protocol

from specroutes.errors import InvalidRoutePathError
from specroutes.routing.specs import AuthorizerRef, HandlerRef
from specroutes.routing.verbs import CanonicalMethod

_WHITESPACE = re.compile(r"\s")


class RoutingBackend(Protocol):
    """Installs routes into a gateway. Raises RouteRegistrationError on rejection."""

    def register_route(
        self,
        path: str,
        methods: AbstractSet[CanonicalMethod],
        handler: HandlerRef,
        authorizer: Optional[AuthorizerRef] = None,
    ) -> None: ...


def validate_route_path(path: str) -> None:
    """
    Reject paths a gateway would not accept as a route key.

    Doubled separators are allowed; prefixing may produce them.
    """
    if not path:
        raise InvalidRoutePathError(path, "empty path")
    if not path.startswith("/"):
        raise InvalidRoutePathError(path, "must start with '/'")
    if _WHITESPACE.search(path):
        raise InvalidRoutePathError(path, "contains whitespace")

    depth = 0
    for ch in path:
        if ch == "{":
            depth += 1
            if depth > 1:
                raise InvalidRoutePathError(path, "nested '{'")
        elif ch == "}":
            depth -= 1
            if depth < 0:
                raise InvalidRoutePathError(path, "unbalanced '}'")
    if depth != 0:
        raise InvalidRoutePathError(path, "unbalanced '{'")


def sorted_methods(methods: AbstractSet[CanonicalMethod]) -> list[CanonicalMethod]:
    # stable order for multi-method calls
    order = list(CanonicalMethod)
    return sorted(methods, key=order.index)
