from __future__ import annotations

from typing import AbstractSet, Optional

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from specroutes.backends.base import sorted_methods, validate_route_path
from specroutes.errors import RouteConflictError, UnsupportedHandlerError
from specroutes.routing.specs import AuthorizerRef, CallableHandler, HandlerRef
from specroutes.routing.verbs import CONCRETE_METHODS, CanonicalMethod


def _http_methods(method: CanonicalMethod) -> list[str]:
    if method is CanonicalMethod.ANY:
        return [m.value for m in CONCRETE_METHODS] + ["OPTIONS"]
    return [method.value]


def bearer_dependency(authorizer: AuthorizerRef):
    """
    Route dependency standing in for the gateway authorizer: a bearer token
    must be present. Token verification belongs to the identity provider.
    """
    scheme = HTTPBearer(auto_error=False, scheme_name=authorizer.name)

    def _require_token(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(scheme),
    ) -> str:
        if credentials is None or not credentials.credentials:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Unauthorized",
                headers={"WWW-Authenticate": "Bearer"},
            )
        return credentials.credentials

    return _require_token


class FastAPIRoutingBackend:
    """Installs registrations into a live FastAPI application."""

    def __init__(self, app: FastAPI) -> None:
        self.app = app
        self._keys: set[tuple[str, CanonicalMethod]] = set()

    def register_route(
        self,
        path: str,
        methods: AbstractSet[CanonicalMethod],
        handler: HandlerRef,
        authorizer: Optional[AuthorizerRef] = None,
    ) -> None:
        if not isinstance(handler, CallableHandler):
            raise UnsupportedHandlerError(handler, "fastapi")
        validate_route_path(path)

        ordered = sorted_methods(methods)
        for m in ordered:
            if (path, m) in self._keys:
                raise RouteConflictError(path, m.value)

        dependencies = [Depends(bearer_dependency(authorizer))] if authorizer else None
        for m in ordered:
            self.app.add_api_route(
                path,
                handler.endpoint,
                methods=_http_methods(m),
                name=f"{handler.name}:{m.value} {path}",
                dependencies=dependencies,
            )
            self._keys.add((path, m))
