from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class OperationObject(BaseModel):
    """
    One path+verb entry of the API description.

    Only `security` drives routing, and only by being present and non-empty.
    Every other field is kept as-is in `model_extra`.
    """

    model_config = ConfigDict(extra="allow")

    security: Any = None


class OpenAPIDocument(BaseModel):
    model_config = ConfigDict(extra="allow")

    paths: dict[str, dict[str, OperationObject]]

    @field_validator("paths")
    @classmethod
    def _non_empty_keys(cls, paths: dict[str, dict[str, Any]]) -> dict[str, dict[str, Any]]:
        for path, operations in paths.items():
            if not path:
                raise ValueError("path keys must be non-empty")
            for verb in operations:
                if not verb:
                    raise ValueError(f"verb keys under {path!r} must be non-empty")
        return paths
