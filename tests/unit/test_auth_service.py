"""Unit tests for authentication service"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthenticationError, ConflictError
from app.core.security import (create_access_token, hash_password,
                               verify_password, verify_token)
from app.models.user import User
from app.schemas.user import UserCreate
from app.services.auth_service import AuthService


@pytest.fixture
def auth_db():
    """Create mock database session"""
    db = AsyncMock(spec=AsyncSession)
    db.commit = AsyncMock()
    return db


@pytest.fixture
def sample_user_data():
    """Sample user registration data"""
    return UserCreate(email="test@example.com", name="Test User", password="SecurePass123!")


@pytest.fixture
def mock_user():
    return User(
        id=uuid4(),
        email="test@example.com",
        name="Test User",
        hashed_password=hash_password("SecurePass123!"),
        is_active=True,
    )


class TestRegisterUser:
    """Test user registration"""

    @pytest.mark.asyncio
    @patch("app.services.auth_service.UserRepository")
    async def test_register_user_success(self, mock_user_repo, auth_db, sample_user_data):
        mock_user_repo.check_email_exists = AsyncMock(return_value=False)
        mock_user_repo.create = AsyncMock(side_effect=lambda db, user: user)

        user = await AuthService.register_user(sample_user_data, auth_db)

        assert user.email == "test@example.com"
        assert user.name == "Test User"
        assert user.hashed_password != "SecurePass123!"
        assert verify_password("SecurePass123!", user.hashed_password)
        auth_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    @patch("app.services.auth_service.UserRepository")
    async def test_register_duplicate_email(self, mock_user_repo, auth_db, sample_user_data):
        mock_user_repo.check_email_exists = AsyncMock(return_value=True)

        with pytest.raises(ConflictError, match="already registered"):
            await AuthService.register_user(sample_user_data, auth_db)

        auth_db.commit.assert_not_called()


class TestLogin:
    """Test login"""

    @pytest.mark.asyncio
    @patch("app.services.auth_service.UserRepository")
    async def test_login_success(self, mock_user_repo, auth_db, mock_user):
        mock_user_repo.get_by_email = AsyncMock(return_value=mock_user)

        token = await AuthService.login("test@example.com", "SecurePass123!", auth_db)

        assert token["token_type"] == "bearer"
        assert verify_token(token["access_token"])["sub"] == str(mock_user.id)

    @pytest.mark.asyncio
    @patch("app.services.auth_service.UserRepository")
    async def test_login_wrong_password(self, mock_user_repo, auth_db, mock_user):
        mock_user_repo.get_by_email = AsyncMock(return_value=mock_user)

        with pytest.raises(AuthenticationError):
            await AuthService.login("test@example.com", "wrong-password", auth_db)

    @pytest.mark.asyncio
    @patch("app.services.auth_service.UserRepository")
    async def test_login_unknown_email(self, mock_user_repo, auth_db):
        mock_user_repo.get_by_email = AsyncMock(return_value=None)

        with pytest.raises(AuthenticationError, match="Incorrect email or password"):
            await AuthService.login("nobody@example.com", "whatever", auth_db)

    @pytest.mark.asyncio
    @patch("app.services.auth_service.UserRepository")
    async def test_inactive_user_cannot_login(self, mock_user_repo, auth_db, mock_user):
        mock_user.is_active = False
        mock_user_repo.get_by_email = AsyncMock(return_value=mock_user)

        assert await AuthService.authenticate_user("test@example.com", "SecurePass123!", auth_db) is None


class TestSecurity:
    """Test password and token helpers"""

    def test_malformed_hash_does_not_verify(self):
        assert verify_password("secret", "not-a-bcrypt-hash") is False

    def test_tampered_token_is_rejected(self):
        token = create_access_token({"sub": "someone"})

        with pytest.raises(JWTError):
            verify_token(token + "x")
