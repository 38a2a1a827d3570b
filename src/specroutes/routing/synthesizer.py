from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Optional

from specroutes.backends.base import RoutingBackend
from specroutes.observability.logging import get_logger
from specroutes.routing.specs import AuthorizerRef, HandlerRef, RouteRegistration
from specroutes.routing.verbs import resolve_verb

logger = get_logger(__name__)

SpecificationDocument = Mapping[str, Mapping[str, Any]]
Observer = Callable[[RouteRegistration], None]


def normalize_prefix(prefix: Optional[str]) -> Optional[str]:
    """'v2' -> '/v2', '/v2' unchanged, '' / None -> no prefix."""
    if not prefix:
        return None
    if not prefix.startswith("/"):
        return "/" + prefix
    return prefix


def effective_path(prefix: Optional[str], path: str) -> str:
    """
    Join an already-normalized prefix onto a spec path.

    Separators are never collapsed: '/v2/' + '/games' stays '/v2//games'.
    """
    if prefix is None:
        return path
    if path.startswith("/"):
        return prefix + path
    return prefix + "/" + path


def requires_authorizer(descriptor: Any) -> bool:
    """True when the operation carries a non-empty `security` field."""
    if descriptor is None:
        return False
    if isinstance(descriptor, Mapping):
        security = descriptor.get("security")
    else:
        security = getattr(descriptor, "security", None)
    return bool(security)


def log_registration(registration: RouteRegistration) -> None:
    logger.info(
        "route.added",
        method=registration.method.value,
        path=registration.path,
        authorized=registration.requires_auth,
    )


def synthesize(
    spec: SpecificationDocument,
    handler: HandlerRef,
    authorizer: AuthorizerRef,
    backend: RoutingBackend,
    prefix: Optional[str] = None,
    observer: Optional[Observer] = None,
) -> list[RouteRegistration]:
    """
    Register one route per (path, verb) pair of `spec` against `backend`.

    Order follows the document's own key order, both for paths and for the
    verbs under each path; that order is also the backend call order.
    No deduplication: 'get' and 'GET' under one path register twice.

    A backend rejection propagates immediately. Routes registered before
    the failure stay registered.
    """
    notify = observer or log_registration
    base = normalize_prefix(prefix)
    emitted: list[RouteRegistration] = []

    for path, operations in spec.items():
        for verb, descriptor in operations.items():
            registration = RouteRegistration(
                path=effective_path(base, path),
                method=resolve_verb(verb),
                handler=handler,
                authorizer=authorizer if requires_authorizer(descriptor) else None,
            )
            backend.register_route(
                registration.path,
                frozenset({registration.method}),
                registration.handler,
                registration.authorizer,
            )
            emitted.append(registration)
            notify(registration)

    return emitted
