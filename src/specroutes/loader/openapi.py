from __future__ import annotations

import json
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from specroutes.domain.models import OpenAPIDocument, OperationObject
from specroutes.errors import SpecLoadError
from specroutes.observability.logging import get_logger

logger = get_logger(__name__)

SpecDocument = dict[str, dict[str, OperationObject]]


def parse_spec(text: str, source: str = "<string>") -> SpecDocument:
    """
    Parse a JSON API description into path -> verb -> OperationObject.

    Key order of the document is preserved at both levels.
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SpecLoadError(source, f"invalid JSON: {exc.msg} (line {exc.lineno})") from exc

    if not isinstance(raw, dict):
        raise SpecLoadError(source, "top-level value must be an object")
    if "paths" not in raw:
        raise SpecLoadError(source, "missing 'paths'")

    try:
        doc = OpenAPIDocument.model_validate(raw)
    except ValidationError as exc:
        first = exc.errors()[0]
        where = ".".join(str(p) for p in first["loc"])
        raise SpecLoadError(source, f"{where}: {first['msg']}") from exc

    logger.debug(
        "spec.loaded",
        source=source,
        paths=len(doc.paths),
        operations=sum(len(ops) for ops in doc.paths.values()),
    )
    return doc.paths


def load_spec(path: Union[str, Path]) -> SpecDocument:
    p = Path(path).expanduser()
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecLoadError(str(p), f"cannot read file: {exc.strerror or exc}") from exc
    return parse_spec(text, source=str(p))
