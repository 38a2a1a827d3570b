from __future__ import annotations

from pathlib import Path
from typing import Optional

import json
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from specroutes.backends.sqlite_store import SQLiteRoutingBackend
from specroutes.config import get_settings
from specroutes.errors import SpecRoutesError
from specroutes.observability.logging import configure_logging
from specroutes.orchestrator.pipeline import default_db_path, run_provision
from specroutes.routing.verbs import resolve_verb


app = typer.Typer(no_args_is_help=True, add_completion=False)

routes_app = typer.Typer(no_args_is_help=True)
app.add_typer(routes_app, name="routes")

console = Console()


@app.callback()
def _setup() -> None:
    configure_logging(get_settings())


def _fail(exc: SpecRoutesError) -> None:
    console.print(f"[bold red]error[/bold red]: {escape(str(exc))}", soft_wrap=True)
    raise typer.Exit(code=1)


def _resolve_db(db: Optional[str], spec: Optional[str]) -> Path:
    if db:
        return Path(db).expanduser().resolve()
    settings = get_settings()
    return default_db_path(Path(spec) if spec else settings.spec_path, settings)


@app.command()
def provision(
    spec: Optional[str] = typer.Argument(None, help="Path to the JSON API description (default: SPECROUTES_SPEC_PATH)"),
    prefix: Optional[str] = typer.Option(None, help="Path prefix for every route (e.g. v2)"),
    db: Optional[str] = typer.Option(None, help="Route table DB (default: <spec dir>/.specroutes/routes.db)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Synthesize without persisting"),
    replace: bool = typer.Option(False, "--replace", help="Clear existing routes first"),
) -> None:
    if spec is None:
        spec = get_settings().spec_path
    if spec is None:
        raise typer.BadParameter("No spec given and SPECROUTES_SPEC_PATH is not set")
    spec_path = Path(spec).expanduser().resolve()
    if not spec_path.exists():
        raise typer.BadParameter(f"Spec file does not exist: {spec_path}")

    try:
        result = run_provision(
            spec_path,
            prefix=prefix,
            db_path=Path(db).expanduser() if db else None,
            dry_run=dry_run,
            replace=replace,
        )
    except SpecRoutesError as exc:
        _fail(exc)
        return

    console.print(f"[bold green]specroutes[/bold green] provision: {result.spec_path}")
    console.print(f"Mode: {result.mode}")
    if result.prefix:
        console.print(f"Prefix: {result.prefix}")
    if result.replaced_routes:
        console.print(f"Replaced routes: {result.replaced_routes}")

    table = Table(show_header=True, header_style="bold")
    table.add_column("METHOD", no_wrap=True)
    table.add_column("PATH")
    table.add_column("AUTH", no_wrap=True)
    for r in result.registrations:
        table.add_row(
            r.method.value,
            r.path,
            r.authorizer.name if r.authorizer else "-",
        )
    console.print(table)

    console.print(
        f"Routes registered: [bold]{len(result.registrations)}[/bold] "
        f"(authorized={result.authorized_count})"
    )
    if result.db_path:
        console.print(f"DB: {result.db_path}")


@routes_app.command("list")
def routes_list(
    spec: Optional[str] = typer.Option(None, help="API description the table was provisioned from (locates the default DB)"),
    db: Optional[str] = typer.Option(None, help="Route table DB"),
    method: Optional[str] = typer.Option(None, help="Filter by HTTP method (GET/POST/...)"),
    path_contains: Optional[str] = typer.Option(None, help="Substring match on HTTP path"),
    limit: int = typer.Option(200, help="Max rows to print"),
    format: str = typer.Option("table", help="Output format: table|json"),
) -> None:
    db_path = _resolve_db(db, spec)
    if not db_path.exists():
        raise typer.BadParameter(f"Route table does not exist: {db_path}")
    store = SQLiteRoutingBackend(db_path)

    rows = store.list_routes(method=method, path_contains=path_contains, limit=limit)

    if format.lower() == "json":
        typer.echo(json.dumps(rows, indent=2))
        return

    console.print(f"[bold]DB:[/bold] {db_path}")
    console.print(f"[bold]Routes:[/bold] {len(rows)} (showing up to {limit})")

    table = Table(show_header=True, header_style="bold")
    table.add_column("METHOD", no_wrap=True)
    table.add_column("PATH")
    table.add_column("HANDLER")
    table.add_column("AUTHORIZER")

    for r in rows:
        table.add_row(
            r["method"],
            r["http_path"],
            r["handler_name"],
            r["authorizer_name"] or "-",
        )

    console.print(table)


@app.command()
def resolve(verb: str = typer.Argument(..., help="Verb token, any case")) -> None:
    console.print(resolve_verb(verb).value)


@app.command()
def ping() -> None:
    console.print("pong")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
