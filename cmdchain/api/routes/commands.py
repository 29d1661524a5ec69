"""Binding of route-map entries to command endpoints."""

import json
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, Request
from structlog import get_logger

from cmdchain.core.errors import PayloadValidationError
from cmdchain.plugins.declaration import MethodSpec, RouteMap, path_params
from cmdchain.services.command_executor import CommandExecutor


logger = get_logger(__name__)

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


async def read_json_body(request: Request) -> dict[str, Any]:
    """Parse the request body as a JSON object; an empty body is ``{}``."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except json.JSONDecodeError as e:
        raise PayloadValidationError(f"Request body is not valid JSON: {e}") from e
    if not isinstance(body, dict):
        raise PayloadValidationError("Request body must be a JSON object")
    return body


def collect_args(
    spec: MethodSpec,
    body: dict[str, Any],
    path_values: dict[str, Any],
    param_names: list[str],
) -> list[Any]:
    """Build command arguments: payload params in declared order, then path params.

    Missing optional payload params are passed as ``None``.

    Raises:
        PayloadValidationError: If a required payload param is missing
    """
    missing = [name for name in spec.payload_params.required if name not in body]
    if missing:
        raise PayloadValidationError(
            f"Command {spec.command} is missing required parameters: "
            f"{', '.join(missing)}",
            details={"missing": missing},
        )
    args = [body.get(name) for name in spec.payload_params.names]
    args.extend(path_values[name] for name in param_names)
    return args


def make_command_endpoint(
    path: str, method: str, spec: MethodSpec
) -> Callable[[Request], Awaitable[dict[str, Any]]]:
    param_names = path_params(path)

    async def endpoint(request: Request) -> dict[str, Any]:
        body: dict[str, Any] | None = None
        if method in BODY_METHODS:
            body = await read_json_body(request)
        args = collect_args(spec, body or {}, request.path_params, param_names)
        executor: CommandExecutor = request.app.state.command_executor
        value = await executor.dispatch(
            method, request.url.path, body, spec.command, args
        )
        return {"value": value}

    endpoint.__name__ = spec.command
    return endpoint


def build_command_router(route_map: RouteMap) -> APIRouter:
    """Create one endpoint per (path, method) pair of ``route_map``."""
    router = APIRouter(tags=["commands"])
    for path, methods in route_map.items():
        for method, spec in methods.items():
            router.add_api_route(
                path,
                make_command_endpoint(path, method, spec),
                methods=[method],
                name=spec.command,
            )
    logger.debug(
        "command_routes_built",
        routes=sum(len(methods) for methods in route_map.values()),
    )
    return router
