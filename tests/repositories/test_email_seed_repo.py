"""Test seed repository password storage"""
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest

from repositories.email_seed_repo import EmailSeedRepository
from tests.fakes import make_seed


class RecordingSessionFactory:
    """async_sessionmaker stand-in that records committed transactions"""

    def __init__(self):
        self.session = AsyncMock()
        self.committed = 0

    @asynccontextmanager
    async def begin(self):
        yield self.session
        self.committed += 1


@pytest.mark.asyncio
async def test_set_password_commits_outside_request_session():
    """Test a new password is committed in its own transaction"""
    request_db = AsyncMock()
    factory = RecordingSessionFactory()
    repo = EmailSeedRepository(request_db, session_factory=factory)
    seed = make_seed(id="seed-1", encrypted_password="enc:old")

    await repo.set_password(seed, "enc:new")

    assert factory.committed == 1
    statement = factory.session.execute.await_args.args[0]
    params = statement.compile().params
    assert params["encrypted_password"] == "enc:new"
    assert "seed-1" in params.values()
    assert seed.encrypted_password == "enc:new"
    request_db.flush.assert_not_awaited()
    request_db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_set_password_failure_propagates():
    """Test a failed password write is not reported as stored"""
    factory = RecordingSessionFactory()
    factory.session.execute.side_effect = RuntimeError("database unavailable")
    repo = EmailSeedRepository(AsyncMock(), session_factory=factory)
    seed = make_seed(encrypted_password="enc:old")

    with pytest.raises(RuntimeError):
        await repo.set_password(seed, "enc:new")

    assert factory.committed == 0
    assert seed.encrypted_password == "enc:old"
