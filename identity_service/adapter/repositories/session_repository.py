from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from identity_service.app.repositories.session_repository import ISessionRepository
from identity_service.domain.entities import Session


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def find_active_by_refresh_token(
        self, refresh_token_hash: str, device_id: str, now: datetime
    ) -> Optional[Session]:
        """
        Find session by refresh token hash and device.

        Wrong token, wrong device and expired refresh window all yield None,
        so callers cannot tell which factor failed.
        """
        stmt = select(Session).where(
            Session.refresh_token_hash == refresh_token_hash,
            Session.device_id == device_id,
            Session.is_active == True,
            Session.refresh_expires_at > now,
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def find_active_by_access_token(
        self, access_token: str, now: datetime
    ) -> Optional[Session]:
        """Find the active, unexpired session holding this exact access token"""
        stmt = select(Session).where(
            Session.access_token == access_token,
            Session.is_active == True,
            Session.expires_at > now,
        )
        result = await self.session.exec(stmt)
        return result.first()

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
        Compare-and-swap the token pair.

        The WHERE clause re-checks the old refresh hash, so of several
        concurrent rotations of one refresh token only the first update
        matches a row.
        """
        stmt = (
            update(Session)
            .where(
                Session.id == session_id,
                Session.refresh_token_hash == expected_refresh_token_hash,
                Session.is_active == True,
            )
            .values(
                access_token=access_token,
                refresh_token_hash=refresh_token_hash,
                jwt_token_id=jwt_token_id,
                expires_at=expires_at,
                refresh_expires_at=refresh_expires_at,
                last_activity=now,
            )
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def touch(self, access_token: str, now: datetime) -> None:
        """Update last_activity"""
        stmt = (
            update(Session)
            .where(Session.access_token == access_token)
            .values(last_activity=now)
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def invalidate_by_access_token(self, access_token: str) -> int:
        """Deactivate the session holding this access token"""
        stmt = (
            update(Session)
            .where(Session.access_token == access_token, Session.is_active == True)
            .values(is_active=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def invalidate_all_by_user_id(self, user_id: int) -> int:
        """Deactivate all active sessions for a user"""
        stmt = (
            update(Session)
            .where(Session.user_id == user_id, Session.is_active == True)
            .values(is_active=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def deactivate_expired(self, now: datetime) -> int:
        """Deactivate active sessions past their refresh expiry"""
        stmt = (
            update(Session)
            .where(Session.refresh_expires_at <= now, Session.is_active == True)
            .values(is_active=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
