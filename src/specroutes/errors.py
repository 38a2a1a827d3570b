from __future__ import annotations


class SpecRoutesError(Exception):
    """Base class for every error raised by specroutes."""


class SpecLoadError(SpecRoutesError):
    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


class RouteRegistrationError(SpecRoutesError):
    """A routing backend refused a registration."""


class RouteConflictError(RouteRegistrationError):
    def __init__(self, path: str, method: str) -> None:
        super().__init__(f"route already registered: {method} {path}")
        self.path = path
        self.method = method


class InvalidRoutePathError(RouteRegistrationError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"invalid route path {path!r}: {reason}")
        self.path = path
        self.reason = reason


class UnsupportedHandlerError(RouteRegistrationError):
    def __init__(self, handler: object, backend: str) -> None:
        name = getattr(handler, "name", repr(handler))
        super().__init__(f"handler {name!r} cannot be bound by the {backend} backend")
        self.handler = handler
