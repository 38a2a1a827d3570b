import json
from pathlib import Path

import pytest

from specroutes.errors import SpecLoadError
from specroutes.loader.openapi import load_spec, parse_spec
from specroutes.routing.synthesizer import requires_authorizer


def test_load_spec_preserves_key_order(tmp_path: Path):
    doc = {
        "openapi": "3.0.1",
        "paths": {
            "/signup": {"post": {"security": [{"auth": []}], "operationId": "signup"}, "get": {}},
            "/games": {"Delete": {"requestBody": {"content": {}}}, "get": {}},
        },
    }
    p = tmp_path / "player-signups.json"
    p.write_text(json.dumps(doc), encoding="utf-8")

    spec = load_spec(p)

    assert list(spec) == ["/signup", "/games"]
    assert list(spec["/games"]) == ["Delete", "get"]
    assert spec["/signup"]["post"].model_extra["operationId"] == "signup"
    assert requires_authorizer(spec["/signup"]["post"])
    assert not requires_authorizer(spec["/games"]["get"])


def test_unknown_operation_fields_pass_through():
    spec = parse_spec('{"paths": {"/x": {"get": {"responses": {"200": {}}}}}}')
    assert spec["/x"]["get"].model_extra["responses"] == {"200": {}}


@pytest.mark.parametrize(
    "text, fragment",
    [
        ("{not json", "invalid JSON"),
        ("[]", "top-level"),
        ('{"openapi": "3.0.1"}', "missing 'paths'"),
        ('{"paths": {"/x": {"get": "nope"}}}', "paths.x"),
        ('{"paths": {"": {"get": {}}}}', "non-empty"),
        ('{"paths": {"/x": {"": {}}}}', "non-empty"),
    ],
)
def test_malformed_documents_raise_spec_load_error(text, fragment):
    with pytest.raises(SpecLoadError) as info:
        parse_spec(text, source="doc.json")
    assert info.value.source == "doc.json"
    assert fragment.split(".")[0] in str(info.value)


def test_missing_file(tmp_path: Path):
    with pytest.raises(SpecLoadError) as info:
        load_spec(tmp_path / "missing.json")
    assert "cannot read file" in str(info.value)


@pytest.mark.parametrize(
    "operation",
    [
        {"summary": None},
        {"operationId": 7},
        {"description": ["not", "a", "string"]},
    ],
)
def test_non_routing_fields_are_opaque(operation):
    spec = parse_spec(json.dumps({"paths": {"/x": {"get": operation}}}))
    assert not requires_authorizer(spec["/x"]["get"])


@pytest.mark.parametrize(
    "security",
    [
        {"auth": []},
        [{"oauth": ["read", {"x": 1}]}],
        "bearer",
    ],
)
def test_any_non_empty_security_attaches_authorizer(security):
    spec = parse_spec(json.dumps({"paths": {"/x": {"get": {"security": security}}}}))
    assert requires_authorizer(spec["/x"]["get"])


@pytest.mark.parametrize("security", [None, [], {}])
def test_empty_security_does_not_attach_authorizer(security):
    spec = parse_spec(json.dumps({"paths": {"/x": {"get": {"security": security}}}}))
    assert not requires_authorizer(spec["/x"]["get"])
