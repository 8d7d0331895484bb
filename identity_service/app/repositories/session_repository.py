from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from identity_service.domain.entities import Session


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Create a new session"""
        pass

    @abstractmethod
    async def find_active_by_refresh_token(
        self, refresh_token_hash: str, device_id: str, now: datetime
    ) -> Optional[Session]:
        """Find the active, unexpired session bound to a refresh token hash and device"""
        pass

    @abstractmethod
    async def find_active_by_access_token(
        self, access_token: str, now: datetime
    ) -> Optional[Session]:
        """Find the active session whose access token matches exactly and has not expired"""
        pass

    @abstractmethod
    async def rotate_tokens(
        self,
        session_id: UUID,
        expected_refresh_token_hash: str,
        access_token: str,
        refresh_token_hash: str,
        jwt_token_id: UUID,
        expires_at: datetime,
        refresh_expires_at: datetime,
        now: datetime,
    ) -> bool:
        """
        Swap the token pair of a session if it still holds the expected refresh hash.
        Returns False when another rotation already consumed the refresh token.
        """
        pass

    @abstractmethod
    async def touch(self, access_token: str, now: datetime) -> None:
        """Update last_activity for the session holding the access token"""
        pass

    @abstractmethod
    async def invalidate_by_access_token(self, access_token: str) -> int:
        """Deactivate the session holding the access token. Returns count."""
        pass

    @abstractmethod
    async def invalidate_all_by_user_id(self, user_id: int) -> int:
        """Deactivate all active sessions for a user. Returns count."""
        pass

    @abstractmethod
    async def deactivate_expired(self, now: datetime) -> int:
        """Deactivate active sessions whose refresh token expired. Returns count."""
        pass
