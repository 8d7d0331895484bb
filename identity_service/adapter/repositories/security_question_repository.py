from typing import List

from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from identity_service.app.repositories.security_question_repository import (
    ISecurityQuestionRepository,
)
from identity_service.domain.entities import SecurityQuestion


class SecurityQuestionRepository(ISecurityQuestionRepository):
    """Security question repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, question: SecurityQuestion) -> SecurityQuestion:
        """Create a new security question"""
        self.session.add(question)
        await self.session.flush()
        await self.session.refresh(question)
        return question

    async def get_by_user_id(self, user_id: int) -> List[SecurityQuestion]:
        """Get all questions for a user, oldest first"""
        stmt = (
            select(SecurityQuestion)
            .where(SecurityQuestion.user_id == user_id)
            .order_by(SecurityQuestion.id)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def get_by_ids_for_user(
        self, user_id: int, question_ids: List[int]
    ) -> List[SecurityQuestion]:
        """Get the user's questions among the given IDs"""
        if not question_ids:
            return []
        stmt = select(SecurityQuestion).where(
            SecurityQuestion.user_id == user_id,
            col(SecurityQuestion.id).in_(question_ids),
        )
        result = await self.session.exec(stmt)
        return list(result.all())
