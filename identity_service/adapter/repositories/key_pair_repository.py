from typing import Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from identity_service.app.repositories.key_pair_repository import IKeyPairRepository
from identity_service.domain.entities import KeyPair


class KeyPairRepository(IKeyPairRepository):
    """Key pair repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_id(self, user_id: int) -> Optional[KeyPair]:
        stmt = select(KeyPair).where(KeyPair.user_id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, key_pair: KeyPair) -> KeyPair:
        self.session.add(key_pair)
        await self.session.flush()
        await self.session.refresh(key_pair)
        return key_pair
