"""
Customer API — Resource Repository
===================================

What:  Performs create/get/list/update/delete for one resource type.
How:   Each operation receives the request's AsyncSession explicitly, issues a
       single statement, and commits its own writes. Driver failures are
       rolled back and re-raised as StoreUnavailableError.
Who:   Called by the generated route handlers; nothing else writes resources.

Outcomes:
    create(payload)       → resource | ValidationError | StoreUnavailableError
    get(id)               → resource | NotFoundError | StoreUnavailableError
    list()                → [resource] | StoreUnavailableError
    update(id, payload)   → resource | NotFoundError | ValidationError | StoreUnavailableError
    delete(id)            → None | NotFoundError | StoreUnavailableError

No operation is retried here. A pool checkout timeout or a lost connection
surfaces once, as StoreUnavailableError, and the caller decides what to do.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, List

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from customer_api.exceptions import NotFoundError, StoreUnavailableError
from customer_api.resources import Payload, ResourceDefinition

logger = logging.getLogger(__name__)

# Connection refused/reset and socket timeouts can escape the DBAPI wrapper
STORE_ERRORS = (SQLAlchemyError, OSError)


class ResourceRepository:
    """
    CRUD operations for the resource type described by `resource`.

    Stateless apart from the definition; one instance per resource type is
    shared by all requests.
    """

    def __init__(self, resource: ResourceDefinition):
        self.resource = resource
        self.model = resource.model

    async def create(self, db: AsyncSession, payload: Payload) -> Any:
        """
        Validate `payload` and insert a new resource.

        The payload is validated before any store round-trip. The identifier
        and created_at are assigned by the model defaults at insert.
        """
        values = self.resource.validate_create(payload)
        obj = self.model(**values)
        try:
            db.add(obj)
            await db.commit()
        except STORE_ERRORS as e:
            raise await self._store_failure(db, "create", e) from e
        logger.info("Created %s %s", self.resource.name, obj.id)
        return obj

    async def get(self, db: AsyncSession, resource_id: uuid.UUID) -> Any:
        """Fetch one resource by primary key."""
        try:
            result = await db.execute(
                select(self.model).where(self.model.id == resource_id)
            )
            obj = result.scalar_one_or_none()
        except STORE_ERRORS as e:
            raise await self._store_failure(db, "get", e, resource_id) from e

        if obj is None:
            raise NotFoundError(resource=self.resource.name, resource_id=str(resource_id))
        return obj

    async def list(self, db: AsyncSession) -> List[Any]:
        """
        Return every resource in the collection.

        Order is whatever the store returns; it is not stable across calls.
        """
        try:
            result = await db.execute(select(self.model))
            return list(result.scalars().all())
        except STORE_ERRORS as e:
            raise await self._store_failure(db, "list", e) from e

    async def update(self, db: AsyncSession, resource_id: uuid.UUID, payload: Payload) -> Any:
        """
        Apply a partial update.

        Only the supplied fields are validated and written, in one
        UPDATE ... RETURNING statement. Fields absent from the payload keep
        their stored values. An empty payload returns the current resource.
        """
        changes = self.resource.validate_update(payload)
        if not changes:
            return await self.get(db, resource_id)

        changes["updated_at"] = datetime.now(timezone.utc)
        stmt = (
            update(self.model)
            .where(self.model.id == resource_id)
            .values(**changes)
            .returning(self.model)
            .execution_options(populate_existing=True)
        )
        try:
            result = await db.execute(stmt)
            obj = result.scalar_one_or_none()
            await db.commit()
        except STORE_ERRORS as e:
            raise await self._store_failure(db, "update", e, resource_id) from e

        if obj is None:
            raise NotFoundError(resource=self.resource.name, resource_id=str(resource_id))
        logger.info(
            "Updated %s %s (fields: %s)",
            self.resource.name,
            resource_id,
            ", ".join(sorted(k for k in changes if k != "updated_at")),
        )
        return obj

    async def delete(self, db: AsyncSession, resource_id: uuid.UUID) -> None:
        """Delete one resource; a second delete of the same id is NotFound."""
        stmt = delete(self.model).where(self.model.id == resource_id).returning(self.model.id)
        try:
            result = await db.execute(stmt)
            deleted_id = result.scalar_one_or_none()
            await db.commit()
        except STORE_ERRORS as e:
            raise await self._store_failure(db, "delete", e, resource_id) from e

        if deleted_id is None:
            raise NotFoundError(resource=self.resource.name, resource_id=str(resource_id))
        logger.info("Deleted %s %s", self.resource.name, resource_id)

    async def _store_failure(
        self,
        db: AsyncSession,
        operation: str,
        error: BaseException,
        resource_id: Any = None,
    ) -> StoreUnavailableError:
        """Roll back, log for operators, and build the generic store error."""
        logger.error(
            "Store failure during %s %s%s: %s",
            operation,
            self.resource.name,
            f" {resource_id}" if resource_id is not None else "",
            error,
            exc_info=True,
        )
        try:
            await db.rollback()
        except STORE_ERRORS:
            logger.warning("Rollback after failed %s also failed", operation)
        return StoreUnavailableError(
            context={
                "operation": operation,
                "resource": self.resource.name,
                "error_type": type(error).__name__,
            },
        )
