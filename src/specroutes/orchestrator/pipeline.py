from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from specroutes.backends.memory import InMemoryRoutingBackend
from specroutes.backends.sqlite_store import SQLiteRoutingBackend
from specroutes.config import Settings, get_settings
from specroutes.loader.openapi import load_spec
from specroutes.observability.logging import bind_context, clear_context, get_logger
from specroutes.routing.specs import AuthorizerRef, FunctionHandler, RouteRegistration
from specroutes.routing.synthesizer import normalize_prefix, synthesize

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProvisionResult:
    spec_path: str
    prefix: Optional[str]
    db_path: Optional[str]
    mode: str  # "dry-run" | "sqlite"
    registrations: list[RouteRegistration]
    replaced_routes: int = 0

    @property
    def authorized_count(self) -> int:
        return sum(1 for r in self.registrations if r.requires_auth)


def default_db_path(spec_path: Optional[Path], settings: Settings) -> Path:
    """SPECROUTES_DB_PATH if set, else <spec dir>/.specroutes/routes.db (cwd without a spec)."""
    if settings.db_path:
        return Path(settings.db_path).expanduser().resolve()
    root = Path(spec_path).expanduser().resolve().parent if spec_path else Path.cwd()
    return SQLiteRoutingBackend.db_path_for_project(root)


def handler_from_settings(settings: Settings) -> FunctionHandler:
    return FunctionHandler(
        name=settings.handler_name,
        runtime=settings.handler_runtime,
        code_path=settings.handler_code_path,
    )


def authorizer_from_settings(settings: Settings) -> AuthorizerRef:
    return AuthorizerRef(
        name=settings.authorizer_name,
        user_pool_id=settings.user_pool_id,
        client_ids=tuple(settings.client_ids),
    )


def run_provision(
    spec_path: Path,
    prefix: Optional[str] = None,
    db_path: Optional[Path] = None,
    dry_run: bool = False,
    replace: bool = False,
    settings: Optional[Settings] = None,
) -> ProvisionResult:
    """
    Load the API description at `spec_path` and register its routes.

    dry_run: routes go to a throwaway in-memory table (nothing persisted).
    replace: wipe the SQLite route table first. Without it, provisioning the
    same document twice fails on the first duplicate route.
    """
    settings = settings or get_settings()
    spec_path = Path(spec_path).expanduser().resolve()
    if prefix is None:
        prefix = settings.route_prefix

    spec = load_spec(spec_path)
    handler = handler_from_settings(settings)
    authorizer = authorizer_from_settings(settings)

    replaced = 0
    if dry_run:
        backend = InMemoryRoutingBackend()
        resolved_db = None
        mode = "dry-run"
    else:
        if db_path is None:
            db_path = default_db_path(spec_path, settings)
        backend = SQLiteRoutingBackend(Path(db_path).expanduser())
        resolved_db = str(backend.db_path)
        mode = "sqlite"
        if replace:
            replaced = backend.clear_routes()

    bind_context(spec=str(spec_path), mode=mode)
    logger.info("provision.started", prefix=normalize_prefix(prefix), replaced=replaced)
    try:
        registrations = synthesize(spec, handler, authorizer, backend, prefix=prefix)
    except Exception as exc:
        logger.error("provision.failed", error=str(exc))
        raise
    else:
        logger.info("provision.finished", routes=len(registrations))
    finally:
        clear_context()

    return ProvisionResult(
        spec_path=str(spec_path),
        prefix=normalize_prefix(prefix),
        db_path=resolved_db,
        mode=mode,
        registrations=registrations,
        replaced_routes=replaced,
    )
