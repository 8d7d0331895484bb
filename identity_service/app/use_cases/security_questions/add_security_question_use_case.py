"""
Add Security Question Use Case
"""

import hashlib
import logging

from sqlalchemy.exc import SQLAlchemyError

from identity_service.api.utils.encryption import asymmetric_encrypt
from identity_service.app.services.errors import storage_error
from identity_service.app.services.unit_of_work import UnitOfWork
from identity_service.domain.entities import ErrorCode, SecurityQuestion
from identity_service.libs.result import Error, Result, Return
from .dtos import QuestionInfo

logger = logging.getLogger(__name__)


class AddSecurityQuestionUseCase:
    """
    Use case for registering a security question.

    Business Rules:
    - User must have a registered key pair
    - Answer is RSA-OAEP encrypted with the user's public key
    - A SHA-256 digest of the plaintext answer is stored as integrity signature
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: int, question: str, answer: str) -> Result[QuestionInfo]:
        try:
            return await self._add(user_id, question, answer)
        except SQLAlchemyError as exc:
            return Return.err(storage_error(exc, "Unable to add security question"))

    async def _add(self, user_id: int, question: str, answer: str) -> Result[QuestionInfo]:
        async with self.uow:
            key_pair = await self.uow.key_pairs.get_by_user_id(user_id)
            if key_pair is None:
                return Return.err(Error(ErrorCode.KEYS_NOT_FOUND, "User keys not found"))

            try:
                encrypted_answer = asymmetric_encrypt(key_pair.public_key, answer)
            except (TypeError, ValueError) as exc:
                logger.error(f"Answer encryption failed: {type(exc).__name__}")
                return Return.err(Error(ErrorCode.INTERNAL_ERROR, "Unable to encrypt answer"))

            signature = hashlib.sha256(answer.encode()).hexdigest()

            record = SecurityQuestion(
                user_id=user_id,
                question=question,
                encrypted_answer=encrypted_answer,
                signature=signature,
            )
            record = await self.uow.security_questions.create(record)
            await self.uow.commit()

            return Return.ok(QuestionInfo(id=record.id, question=record.question))
