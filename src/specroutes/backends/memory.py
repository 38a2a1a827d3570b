from __future__ import annotations

from typing import AbstractSet, Optional

from specroutes.backends.base import sorted_methods, validate_route_path
from specroutes.errors import RouteConflictError
from specroutes.routing.specs import AuthorizerRef, HandlerRef, RouteRegistration
from specroutes.routing.verbs import CanonicalMethod


class InMemoryRoutingBackend:
    """Stateful route table kept in process. Rejects exact (path, method) duplicates."""

    def __init__(self) -> None:
        self._routes: list[RouteRegistration] = []
        self._keys: set[tuple[str, CanonicalMethod]] = set()

    @property
    def routes(self) -> list[RouteRegistration]:
        return list(self._routes)

    def register_route(
        self,
        path: str,
        methods: AbstractSet[CanonicalMethod],
        handler: HandlerRef,
        authorizer: Optional[AuthorizerRef] = None,
    ) -> None:
        validate_route_path(path)
        ordered = sorted_methods(methods)
        for m in ordered:
            if (path, m) in self._keys:
                raise RouteConflictError(path, m.value)

        for m in ordered:
            self._keys.add((path, m))
            self._routes.append(
                RouteRegistration(path=path, method=m, handler=handler, authorizer=authorizer)
            )

    def clear(self) -> None:
        self._routes.clear()
        self._keys.clear()

    def __len__(self) -> int:
        return len(self._routes)
