from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from specroutes.routing.verbs import CanonicalMethod


@runtime_checkable
class HandlerRef(Protocol):
    """Anything a route can be bound to. Only `name` is required."""

    name: str


@dataclass(frozen=True)
class FunctionHandler:
    """A deployed compute function fronted by the gateway integration."""

    name: str
    runtime: str = "provided.al2023"
    code_path: str = ""


@dataclass(frozen=True)
class CallableHandler:
    """An in-process Python endpoint (used by the FastAPI backend)."""

    name: str
    endpoint: Callable[..., Any] = field(compare=False)


@dataclass(frozen=True)
class AuthorizerRef:
    name: str
    user_pool_id: str = ""
    client_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class RouteRegistration:
    """
    One emitted route: effective path + canonical method bound to a handler,
    optionally guarded by an authorizer.

    Transient: built during a synthesis pass and handed to a backend.
    """

    path: str
    method: CanonicalMethod
    handler: HandlerRef
    authorizer: Optional[AuthorizerRef] = None

    @property
    def requires_auth(self) -> bool:
        return self.authorizer is not None

    @property
    def route_key(self) -> str:
        # e.g. "POST /signup"
        return f"{self.method.value} {self.path}"
