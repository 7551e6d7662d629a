"""
Customer API — Generated Resource Route Handlers
=================================================

What:  Builds the five CRUD routes for a ResourceDefinition.
How:   build_resource_router() closes over the definition's schemas, so the
       request/response models FastAPI validates against are the same ones it
       publishes in the OpenAPI document.
Who:   main.create_app() mounts one router per entry in RESOURCES.

Route Inventory (per resource, shown for customers):
    POST        /api/customers           create   → 201 | 400 | 401 | 500
    GET         /api/customers           list     → 200 | 401 | 500
    GET         /api/customers/{id}      get      → 200 | 400 | 401 | 404 | 500
    PUT, PATCH  /api/customers/{id}      update   → 200 | 400 | 401 | 404 | 500
    DELETE      /api/customers/{id}      delete   → 204 | 400 | 401 | 404 | 500

Every handler decodes the path identifier before doing anything else and makes
exactly one repository call. Errors propagate as exceptions to the global
handlers in main.py, which produce the response.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from customer_api import identifiers
from customer_api.config import settings
from customer_api.database import get_db_session
from customer_api.resources import ResourceDefinition
from customer_api.schemas.common import ErrorResponse
from customer_api.security import require_api_key
from customer_api.services.repository import ResourceRepository

logger = logging.getLogger(__name__)

UPDATE_METHODS = ("PUT", "PATCH")


def _error_responses(*codes: int) -> Dict[int, Dict[str, Any]]:
    descriptions = {
        400: "Malformed identifier or invalid payload",
        401: "Missing or invalid API key",
        404: "Resource not found",
        500: "Store unavailable",
    }
    return {code: {"description": descriptions[code], "model": ErrorResponse} for code in codes}


def build_resource_router(
    resource: ResourceDefinition,
    repository: Optional[ResourceRepository] = None,
    prefix: Optional[str] = None,
) -> APIRouter:
    """
    Create the CRUD router for one resource type.

    Args:
        resource:   Definition whose schemas drive validation and docs
        repository: Repository to call (defaults to a new ResourceRepository)
        prefix:     Mount point (defaults to "<API_PREFIX>/<collection>")
    """
    repository = repository or ResourceRepository(resource)
    if prefix is None:
        prefix = f"{settings.api_prefix}/{resource.collection}"

    create_schema = resource.create_schema
    update_schema = resource.update_schema
    response_schema = resource.response_schema
    name = resource.name

    router = APIRouter(
        prefix=prefix,
        tags=[resource.tag],
        dependencies=[Depends(require_api_key)],
    )

    id_description = f"External identifier of the {name} (lowercase canonical UUID)"

    @router.post(
        "",
        status_code=status.HTTP_201_CREATED,
        response_model=response_schema,
        responses=_error_responses(400, 401, 500),
        summary=f"Create a {name}",
        operation_id=f"create_{name}",
    )
    async def create_resource(
        payload: create_schema,
        db: AsyncSession = Depends(get_db_session),
    ):
        obj = await repository.create(db, payload)
        return resource.serialize(obj)

    @router.get(
        "",
        response_model=List[response_schema],
        responses=_error_responses(401, 500),
        summary=f"List all {resource.collection}",
        operation_id=f"list_{resource.collection}",
    )
    async def list_resources(db: AsyncSession = Depends(get_db_session)):
        objs = await repository.list(db)
        return [resource.serialize(obj) for obj in objs]

    @router.get(
        "/{resource_id}",
        response_model=response_schema,
        responses=_error_responses(400, 401, 404, 500),
        summary=f"Get a {name} by ID",
        operation_id=f"get_{name}",
    )
    async def get_resource(
        resource_id: str = Path(description=id_description),
        db: AsyncSession = Depends(get_db_session),
    ):
        internal_id = identifiers.decode(resource_id)
        obj = await repository.get(db, internal_id)
        return resource.serialize(obj)

    async def update_resource(
        payload: update_schema,
        resource_id: str = Path(description=id_description),
        db: AsyncSession = Depends(get_db_session),
    ):
        """Fields absent from the body keep their stored values."""
        internal_id = identifiers.decode(resource_id)
        obj = await repository.update(db, internal_id, payload)
        return resource.serialize(obj)

    # PUT and PATCH share partial-merge semantics; separate routes keep the
    # OpenAPI operation ids unique.
    for method in UPDATE_METHODS:
        router.add_api_route(
            "/{resource_id}",
            update_resource,
            methods=[method],
            response_model=response_schema,
            responses=_error_responses(400, 401, 404, 500),
            summary=f"Update a {name} (partial merge)",
            description=(
                "Writes only the fields present in the body. Fields that are omitted "
                "keep their stored values."
            ),
            operation_id=f"{method.lower()}_{name}",
        )

    @router.delete(
        "/{resource_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
        responses=_error_responses(400, 401, 404, 500),
        summary=f"Delete a {name}",
        operation_id=f"delete_{name}",
    )
    async def delete_resource(
        resource_id: str = Path(description=id_description),
        db: AsyncSession = Depends(get_db_session),
    ) -> Response:
        internal_id = identifiers.decode(resource_id)
        await repository.delete(db, internal_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
