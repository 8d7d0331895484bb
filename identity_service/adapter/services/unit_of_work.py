from sqlmodel.ext.asyncio.session import AsyncSession

from identity_service.adapter.repositories.key_pair_repository import KeyPairRepository
from identity_service.adapter.repositories.security_question_repository import (
    SecurityQuestionRepository,
)
from identity_service.adapter.repositories.session_repository import SessionRepository
from identity_service.adapter.repositories.user_repository import UserRepository
from identity_service.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.users = UserRepository(self.session)
        self.sessions = SessionRepository(self.session)
        self.key_pairs = KeyPairRepository(self.session)
        self.security_questions = SecurityQuestionRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
