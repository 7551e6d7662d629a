"""
Customer API — API Description Generator
=========================================

What:  Builds the OpenAPI document served at /openapi.json (and rendered by
       Swagger UI at /docs and ReDoc at /redoc).
How:   The document is derived from `app.routes`, the same route objects the
       handlers are registered with, so it can't list a route that isn't
       mounted or miss one that is. It is assembled once, eagerly during
       startup, and cached on `app.openapi_schema`.

Adjustments to FastAPI's default output:
    FastAPI documents request validation failures as 422. This service answers
    them with 400 and the shared ErrorResponse envelope, so the 422 entries
    (and the schemas only they referenced) are removed.
"""

import logging
from typing import Any, Dict, Iterable, Iterator, List, NamedTuple, Set, Tuple

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from fastapi.routing import APIRoute
from starlette.routing import BaseRoute

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "patch", "head", "options", "trace")

_FASTAPI_VALIDATION_SCHEMAS = ("HTTPValidationError", "ValidationError")


class RouteDescription(NamedTuple):
    method: str
    path: str
    status_codes: Tuple[str, ...]


def build_api_description(app: FastAPI) -> Dict[str, Any]:
    """Derive the OpenAPI document from the application's registered routes."""
    document = get_openapi(
        title=app.title,
        version=app.version,
        openapi_version=app.openapi_version,
        description=app.description,
        routes=app.routes,
        servers=app.servers,
    )
    _drop_unprocessable_entity(document)
    logger.info("API description assembled: %d paths", len(document.get("paths", {})))
    return document


def install_api_description(app: FastAPI) -> None:
    """Replace `app.openapi` with a builder that assembles the document once."""

    def openapi() -> Dict[str, Any]:
        if app.openapi_schema is None:
            app.openapi_schema = build_api_description(app)
        return app.openapi_schema

    app.openapi = openapi


def describe_routes(document: Dict[str, Any]) -> List[RouteDescription]:
    """Enumerate (method, path, status codes) for every documented operation."""
    described = []
    for path, item in document.get("paths", {}).items():
        for method in HTTP_METHODS:
            operation = item.get(method)
            if operation is None:
                continue
            described.append(RouteDescription(
                method=method.upper(),
                path=path,
                status_codes=tuple(sorted(operation.get("responses", {}))),
            ))
    return described


def registered_routes(app: FastAPI) -> Set[Tuple[str, str]]:
    """
    (method, path) pairs of the documented API routes mounted by create_app().

    Reads the routers recorded on `app.state.routers` rather than `app.routes`;
    newer FastAPI releases keep included routers as nested entries there.
    """
    pairs = set()
    for router in app.state.routers:
        for route in _api_routes(router.routes):
            if route.include_in_schema:
                for method in route.methods:
                    pairs.add((method, route.path_format))
    return pairs


def _api_routes(routes: Iterable[BaseRoute]) -> Iterator[APIRoute]:
    for route in routes:
        if isinstance(route, APIRoute):
            yield route
        elif isinstance(getattr(route, "routes", None), list):
            yield from _api_routes(route.routes)


def _drop_unprocessable_entity(document: Dict[str, Any]) -> None:
    for item in document.get("paths", {}).values():
        for method in HTTP_METHODS:
            operation = item.get(method)
            if operation is not None:
                operation.get("responses", {}).pop("422", None)

    schemas = document.get("components", {}).get("schemas", {})
    for name in _FASTAPI_VALIDATION_SCHEMAS:
        schemas.pop(name, None)
