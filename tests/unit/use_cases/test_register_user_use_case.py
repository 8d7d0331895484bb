from datetime import datetime

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from identity_service.app.use_cases.users import (
    GetUserUseCase,
    RegisterUserCommand,
    RegisterUserUseCase,
    TokenExpiry,
)
from identity_service.domain.entities import ErrorCode, Session, User

TOKEN_EXPIRY = TokenExpiry(access_token="1m", refresh_token="2m")


@pytest.fixture
def user_store(mock_uow):
    """Make users.create visible to later users.get_by_id calls"""
    users = {}

    async def create(user):
        users[user.id] = user
        return user

    async def get_by_id(user_id):
        return users.get(user_id)

    mock_uow.users.create.side_effect = create
    mock_uow.users.get_by_id.side_effect = get_by_id
    return users


@pytest.mark.asyncio
async def test_register_user(mock_uow, codec, cipher, user_store):
    # Arrange
    command = RegisterUserCommand(
        user_id=7, email="alice@example.com", phone="+15550100", device_id="device-1"
    )
    use_case = RegisterUserUseCase(mock_uow, codec, cipher)

    # Act
    result = await use_case.execute(command, TOKEN_EXPIRY)

    # Assert
    assert result.is_ok()
    response = result.value
    assert response.user_id == 7
    assert response.user_type == "voter"
    assert response.admin_role == "analyst"
    assert response.email == "alice@example.com"
    assert response.phone == "+15550100"
    assert response.token_expiry == TOKEN_EXPIRY

    claims = codec.verify_access_token(response.access_token).value
    assert claims.user_id == 7
    assert claims.admin_role == "analyst"

    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_register_user_encrypts_contact_fields(mock_uow, codec, cipher, user_store):
    # Arrange
    command = RegisterUserCommand(user_id=7, email="alice@example.com")

    # Act
    await RegisterUserUseCase(mock_uow, codec, cipher).execute(command, TOKEN_EXPIRY)

    # Assert
    stored: User = user_store[7]
    assert stored.email != "alice@example.com"
    assert cipher.decrypt_field(stored.email) == "alice@example.com"
    assert stored.phone is None


@pytest.mark.asyncio
async def test_register_user_creates_bound_session(mock_uow, codec, cipher, user_store):
    # Arrange
    command = RegisterUserCommand(user_id=7, device_id="device-1", user_agent="pytest")

    # Act
    result = await RegisterUserUseCase(mock_uow, codec, cipher).execute(command, TOKEN_EXPIRY)

    # Assert
    session: Session = mock_uow.sessions.create.call_args[0][0]
    assert session.access_token == result.value.access_token
    assert session.jwt_token_id == codec.read_token_id(result.value.access_token)
    assert session.device_id == "device-1"
    assert session.user_agent == "pytest"
    assert str(session.id) == result.value.session_id


@pytest.mark.asyncio
async def test_register_existing_user(mock_uow, codec, cipher):
    # Arrange
    mock_uow.users.get_by_id.return_value = User(id=7)

    # Act
    result = await RegisterUserUseCase(mock_uow, codec, cipher).execute(
        RegisterUserCommand(user_id=7), TOKEN_EXPIRY
    )

    # Assert
    assert result.error.code == ErrorCode.USER_ALREADY_EXISTS
    mock_uow.users.create.assert_not_called()
    mock_uow.sessions.create.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_register_same_id_concurrently(mock_uow, codec, cipher):
    """The primary key catches a profile inserted after the existence check"""
    # Arrange
    mock_uow.users.get_by_id.return_value = None
    mock_uow.users.create.side_effect = IntegrityError(
        "INSERT", {}, Exception("UNIQUE constraint failed: users.id")
    )

    # Act
    result = await RegisterUserUseCase(mock_uow, codec, cipher).execute(
        RegisterUserCommand(user_id=7), TOKEN_EXPIRY
    )

    # Assert
    assert result.is_err()
    assert result.error.code == ErrorCode.USER_ALREADY_EXISTS
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_register_user_storage_failure(mock_uow, codec, cipher):
    # Arrange
    mock_uow.users.get_by_id.side_effect = OperationalError("SELECT", {}, Exception("disk I/O error"))

    # Act
    result = await RegisterUserUseCase(mock_uow, codec, cipher).execute(
        RegisterUserCommand(user_id=7), TOKEN_EXPIRY
    )

    # Assert
    assert result.error.code == ErrorCode.INTERNAL_ERROR
    assert "disk" not in result.error.message


@pytest.mark.asyncio
async def test_get_user_decrypts_contact_fields(mock_uow, cipher):
    # Arrange
    mock_uow.users.get_by_id.return_value = User(
        id=7,
        email=cipher.encrypt_field("alice@example.com"),
        phone=None,
        user_type="voter",
        admin_role="analyst",
        created_at=datetime(2026, 1, 1),
    )

    # Act
    result = await GetUserUseCase(mock_uow, cipher).execute(7)

    # Assert
    assert result.is_ok()
    assert result.value.email == "alice@example.com"
    assert result.value.phone is None
    assert result.value.admin_role == "analyst"


@pytest.mark.asyncio
async def test_get_unknown_user(mock_uow, cipher):
    # Arrange
    mock_uow.users.get_by_id.return_value = None

    # Act
    result = await GetUserUseCase(mock_uow, cipher).execute(404)

    # Assert
    assert result.error.code == ErrorCode.USER_NOT_FOUND


@pytest.mark.asyncio
async def test_get_user_storage_failure(mock_uow, cipher):
    # Arrange
    mock_uow.users.get_by_id.side_effect = OperationalError(
        "SELECT", {}, Exception("database is locked")
    )

    # Act
    result = await GetUserUseCase(mock_uow, cipher).execute(7)

    # Assert
    assert result.is_err()
    assert result.error.code == ErrorCode.INTERNAL_ERROR
