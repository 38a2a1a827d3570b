import json
import logging
from pathlib import Path

import structlog
from typer.testing import CliRunner

from specroutes.cli import app
from specroutes.config import reset_settings

runner = CliRunner()


def write_spec(tmp_path: Path) -> Path:
    p = tmp_path / "spec.json"
    p.write_text(
        json.dumps({"paths": {"/signup": {"post": {"security": [{"auth": []}]}, "get": {}}}}),
        encoding="utf-8",
    )
    return p


def setup_function():
    reset_settings()


def test_ping():
    r = runner.invoke(app, ["ping"])
    assert r.exit_code == 0
    assert "pong" in r.stdout


def test_resolve():
    assert runner.invoke(app, ["resolve", "Delete"]).stdout.strip() == "DELETE"
    assert runner.invoke(app, ["resolve", "trace"]).stdout.strip() == "ANY"


def test_provision_then_list(tmp_path: Path):
    spec = write_spec(tmp_path)
    db = tmp_path / "routes.db"

    r = runner.invoke(app, ["provision", str(spec), "--db", str(db)])
    assert r.exit_code == 0, r.stdout
    assert "Routes registered" in r.stdout

    r = runner.invoke(app, ["routes", "list", "--db", str(db), "--format", "json"])
    assert r.exit_code == 0
    rows = json.loads(r.stdout)
    assert [(x["method"], x["http_path"]) for x in rows] == [("POST", "/signup"), ("GET", "/signup")]


def test_duplicate_provision_exits_nonzero(tmp_path: Path):
    spec = write_spec(tmp_path)
    db = tmp_path / "routes.db"

    assert runner.invoke(app, ["provision", str(spec), "--db", str(db)]).exit_code == 0
    r = runner.invoke(app, ["provision", str(spec), "--db", str(db)])
    assert r.exit_code == 1
    assert "already registered" in r.stdout


def test_invalid_spec_exits_nonzero(tmp_path: Path):
    p = tmp_path / "bad.json"
    p.write_text("{}", encoding="utf-8")
    r = runner.invoke(app, ["provision", str(p), "--dry-run"])
    assert r.exit_code == 1
    assert "missing 'paths'" in r.stdout


def teardown_function():
    # the CLI binds logging to the runner's temporary stderr
    logging.root.handlers.clear()
    structlog.reset_defaults()
    reset_settings()


def test_provision_uses_spec_path_from_env(tmp_path: Path, monkeypatch):
    spec = write_spec(tmp_path)
    monkeypatch.setenv("SPECROUTES_SPEC_PATH", str(spec))
    reset_settings()

    r = runner.invoke(app, ["provision", "--dry-run", "--prefix", "v2"])

    assert r.exit_code == 0, r.stdout
    assert "/v2/signup" in r.stdout


def test_routes_list_finds_default_db_next_to_spec(tmp_path: Path, monkeypatch):
    specs_dir = tmp_path / "specs"
    specs_dir.mkdir()
    spec = write_spec(specs_dir)
    monkeypatch.chdir(tmp_path)

    assert runner.invoke(app, ["provision", str(spec)]).exit_code == 0
    assert (specs_dir / ".specroutes" / "routes.db").exists()

    r = runner.invoke(app, ["routes", "list", "--spec", str(spec), "--format", "json"])
    assert r.exit_code == 0, r.stdout
    assert [x["http_path"] for x in json.loads(r.stdout)] == ["/signup", "/signup"]

    monkeypatch.setenv("SPECROUTES_SPEC_PATH", str(spec))
    reset_settings()
    r = runner.invoke(app, ["routes", "list", "--format", "json"])
    assert r.exit_code == 0, r.stdout
    assert len(json.loads(r.stdout)) == 2
