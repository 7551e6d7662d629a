"""
Customer API — Resource Repository Tests
=========================================

What:  CRUD behavior of ResourceRepository for the customer resource.
How:   Unit tests use a mock AsyncSession; integration tests run against an
       in-memory SQLite database (see the `engine` fixture).

What we test:
    ✅ Invalid payloads fail before any store round-trip
    ✅ Missing rows raise NotFoundError, never StoreUnavailableError
    ✅ Driver failures roll back and raise StoreUnavailableError, without retrying
    ✅ Partial updates leave unspecified fields unchanged
    ✅ Deleting twice yields success then NotFoundError
"""

import uuid
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError

from customer_api import identifiers
from customer_api.exceptions import NotFoundError, StoreUnavailableError, ValidationError
from customer_api.resources import customer_resource
from customer_api.services.repository import ResourceRepository


def _result(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


class TestRepositoryUnit:
    """ResourceRepository against a mock session."""

    def setup_method(self):
        self.repository = ResourceRepository(customer_resource)

    @pytest.mark.asyncio
    async def test_create_invalid_payload_skips_store(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.repository.create(mock_db_session, {"loyalty_points": 1})
        mock_db_session.add.assert_not_called()
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_commits_once(self, mock_db_session):
        obj = await self.repository.create(mock_db_session, {"name": "Ada"})
        assert obj.name == "Ada"
        mock_db_session.add.assert_called_once_with(obj)
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_not_found(self, mock_db_session):
        mock_db_session.execute.return_value = _result(None)
        with pytest.raises(NotFoundError):
            await self.repository.get(mock_db_session, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_update_not_found(self, mock_db_session):
        mock_db_session.execute.return_value = _result(None)
        with pytest.raises(NotFoundError):
            await self.repository.update(mock_db_session, uuid.uuid4(), {"name": "Grace"})

    @pytest.mark.asyncio
    async def test_update_invalid_payload_skips_store(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.repository.update(mock_db_session, uuid.uuid4(), {"name": None})
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_not_found(self, mock_db_session):
        mock_db_session.execute.return_value = _result(None)
        with pytest.raises(NotFoundError):
            await self.repository.delete(mock_db_session, uuid.uuid4())

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        OperationalError("SELECT", {}, ConnectionRefusedError("connection refused")),
        PoolTimeoutError("QueuePool limit of size 20 overflow 10 reached"),
        ConnectionResetError("reset by peer"),
    ])
    async def test_store_failure_is_not_retried(self, mock_db_session, error):
        mock_db_session.execute.side_effect = error
        with pytest.raises(StoreUnavailableError) as exc_info:
            await self.repository.get(mock_db_session, uuid.uuid4())
        assert mock_db_session.execute.await_count == 1
        mock_db_session.rollback.assert_awaited_once()
        assert exc_info.value.context["operation"] == "get"
        assert "refused" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_commit_failure_on_create(self, mock_db_session):
        mock_db_session.commit.side_effect = OperationalError("INSERT", {}, Exception("disk I/O error"))
        with pytest.raises(StoreUnavailableError):
            await self.repository.create(mock_db_session, {"name": "Ada"})
        mock_db_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_list_failure(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("gone"))
        with pytest.raises(StoreUnavailableError):
            await self.repository.list(mock_db_session)


class TestRepositoryIntegration:
    """ResourceRepository against in-memory SQLite, one session per call."""

    def setup_method(self):
        self.repository = ResourceRepository(customer_resource)

    @pytest.mark.asyncio
    async def test_create_then_get_round_trips_identifier(self, session_factory, customer_payload):
        async with session_factory() as db:
            created = await self.repository.create(db, customer_payload)

        external_id = identifiers.encode(created.id)
        async with session_factory() as db:
            fetched = await self.repository.get(db, identifiers.decode(external_id))

        assert fetched.id == created.id
        assert fetched.name == "Ada Lovelace"
        assert fetched.created_at is not None
        assert fetched.updated_at is None

    @pytest.mark.asyncio
    async def test_partial_update_keeps_unspecified_fields(self, session_factory):
        async with session_factory() as db:
            created = await self.repository.create(db, {"name": "a", "loyalty_points": 1})

        async with session_factory() as db:
            updated = await self.repository.update(db, created.id, {"loyalty_points": 2})
        assert updated.name == "a"
        assert updated.loyalty_points == 2
        assert updated.updated_at is not None

        async with session_factory() as db:
            stored = await self.repository.get(db, created.id)
        assert (stored.name, stored.loyalty_points) == ("a", 2)

    @pytest.mark.asyncio
    async def test_empty_update_returns_current(self, session_factory):
        async with session_factory() as db:
            created = await self.repository.create(db, {"name": "a"})
            current = await self.repository.update(db, created.id, {})
        assert current.name == "a"
        assert current.updated_at is None

    @pytest.mark.asyncio
    async def test_update_can_clear_nullable_field(self, session_factory):
        async with session_factory() as db:
            created = await self.repository.create(db, {"name": "a", "email": "a@example.com"})
        async with session_factory() as db:
            updated = await self.repository.update(db, created.id, {"email": None})
        assert updated.email is None
        assert updated.name == "a"

    @pytest.mark.asyncio
    async def test_delete_twice(self, session_factory):
        async with session_factory() as db:
            created = await self.repository.create(db, {"name": "a"})

        async with session_factory() as db:
            assert await self.repository.delete(db, created.id) is None
        async with session_factory() as db:
            with pytest.raises(NotFoundError):
                await self.repository.delete(db, created.id)

    @pytest.mark.asyncio
    async def test_missing_id_is_not_found_for_every_operation(self, session_factory):
        missing = uuid.uuid4()
        async with session_factory() as db:
            with pytest.raises(NotFoundError):
                await self.repository.get(db, missing)
            with pytest.raises(NotFoundError):
                await self.repository.update(db, missing, {"name": "x"})
            with pytest.raises(NotFoundError):
                await self.repository.delete(db, missing)

    @pytest.mark.asyncio
    async def test_list_returns_every_resource(self, session_factory):
        async with session_factory() as db:
            assert await self.repository.list(db) == []
            for i in range(3):
                await self.repository.create(db, {"name": f"Customer {i}"})

        async with session_factory() as db:
            customers = await self.repository.list(db)
        assert sorted(c.name for c in customers) == ["Customer 0", "Customer 1", "Customer 2"]
        assert len({c.id for c in customers}) == 3
