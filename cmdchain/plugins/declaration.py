"""Static declarations a plugin makes before it is instantiated."""

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


HTTP_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})

_EXPRESS_PARAM = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")
_PATH_PARAM = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


class PayloadParams(BaseModel):
    """Body parameters a route accepts, in the order they become arguments."""

    model_config = ConfigDict(extra="forbid")

    required: list[str] = Field(default_factory=list)
    optional: list[str] = Field(default_factory=list)

    @property
    def names(self) -> list[str]:
        return [*self.required, *self.optional]


class MethodSpec(BaseModel):
    """Command bound to one HTTP method of a route."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    command: str = Field(min_length=1)
    payload_params: PayloadParams = Field(
        default_factory=PayloadParams, alias="payloadParams"
    )


RouteMap = dict[str, dict[str, MethodSpec]]


def normalize_path(path: str) -> str:
    """Convert Express-style ``:param`` segments into ``{param}`` segments."""
    path = _EXPRESS_PARAM.sub(r"{\1}", path.strip())
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def path_params(path: str) -> list[str]:
    """Return path parameter names in the order they appear."""
    return _PATH_PARAM.findall(path)


def route_key(path: str) -> str:
    """Shape of a path with parameter names erased, used for conflict checks."""
    return _PATH_PARAM.sub("{}", normalize_path(path))


class _RouteMapModel(BaseModel):
    routes: dict[str, dict[str, MethodSpec]]

    @field_validator("routes", mode="before")
    @classmethod
    def normalize(cls, v: Any) -> Any:
        if not isinstance(v, dict):
            return v
        normalized: dict[str, Any] = {}
        for path, methods in v.items():
            if not isinstance(methods, dict):
                normalized[normalize_path(path)] = methods
                continue
            upper = {str(m).upper(): spec for m, spec in methods.items()}
            if len(upper) != len(methods):
                raise ValueError(f"Route {path} binds a method more than once")
            unknown = set(upper) - HTTP_METHODS
            if unknown:
                raise ValueError(
                    f"Unsupported HTTP method(s) {sorted(unknown)} for route {path}"
                )
            bound = normalized.setdefault(normalize_path(path), {})
            repeated = set(bound) & set(upper)
            if repeated:
                raise ValueError(
                    f"Route {path} binds {sorted(repeated)} more than once"
                )
            bound.update(upper)
        return normalized


def parse_route_map(raw: dict[str, Any]) -> RouteMap:
    """Validate a declared route map and normalise paths and methods.

    Raises:
        pydantic.ValidationError: If the declaration is malformed
    """
    return _RouteMapModel(routes=raw).routes
