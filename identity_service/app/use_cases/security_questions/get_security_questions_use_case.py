"""
Get Security Questions Use Case
"""

from typing import List

from sqlalchemy.exc import SQLAlchemyError

from identity_service.app.services.errors import storage_error
from identity_service.app.services.unit_of_work import UnitOfWork
from identity_service.libs.result import Result, Return
from .dtos import QuestionInfo


class GetSecurityQuestionsUseCase:
    """Lists a user's questions for challenge presentation; answers never leave the store"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: int) -> Result[List[QuestionInfo]]:
        try:
            async with self.uow:
                questions = await self.uow.security_questions.get_by_user_id(user_id)
                return Return.ok(
                    [QuestionInfo(id=q.id, question=q.question) for q in questions]
                )
        except SQLAlchemyError as exc:
            return Return.err(storage_error(exc, "Unable to load security questions"))
