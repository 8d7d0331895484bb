import pytest
from unittest.mock import AsyncMock, MagicMock

from identity_service.api.utils.encryption import FieldCipher
from identity_service.api.utils.jwt import TokenCodec


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_id = AsyncMock()
    uow.users.create = AsyncMock(side_effect=lambda user: user)

    uow.sessions = MagicMock()
    uow.sessions.create = AsyncMock(side_effect=lambda session: session)
    uow.sessions.find_active_by_refresh_token = AsyncMock()
    uow.sessions.find_active_by_access_token = AsyncMock()
    uow.sessions.rotate_tokens = AsyncMock(return_value=True)
    uow.sessions.touch = AsyncMock()
    uow.sessions.invalidate_by_access_token = AsyncMock(return_value=1)
    uow.sessions.invalidate_all_by_user_id = AsyncMock(return_value=0)
    uow.sessions.deactivate_expired = AsyncMock(return_value=0)

    uow.key_pairs = MagicMock()
    uow.key_pairs.get_by_user_id = AsyncMock(return_value=None)
    uow.key_pairs.create = AsyncMock(side_effect=lambda key_pair: key_pair)

    uow.security_questions = MagicMock()
    uow.security_questions.create = AsyncMock()
    uow.security_questions.get_by_user_id = AsyncMock(return_value=[])
    uow.security_questions.get_by_ids_for_user = AsyncMock(return_value=[])
    return uow


@pytest.fixture
def codec():
    """1m access / 2m refresh, the service defaults"""
    return TokenCodec("unit-test-secret", 60, 120)


@pytest.fixture(scope="session")
def cipher():
    return FieldCipher.from_secret("unit-test-encryption-key")
