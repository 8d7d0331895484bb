"""
Verify Security Answers Use Case

Checks a set of answers against the stored, encrypted ones.
"""

import hashlib
import logging
import secrets
from typing import List

from sqlalchemy.exc import SQLAlchemyError

from identity_service.api.utils.encryption import FieldCipher, asymmetric_decrypt
from identity_service.app.services.errors import storage_error
from identity_service.app.services.unit_of_work import UnitOfWork
from identity_service.domain.entities import ErrorCode
from identity_service.libs.result import Error, Result, Return
from .dtos import AnswerSubmission, VerificationResult

logger = logging.getLogger(__name__)


class VerifySecurityAnswersUseCase:
    """
    Use case for security-question verification.

    Business Rules:
    - User must have a registered key pair
    - At least one answer must be supplied
    - Every question id must belong to the user
    - Decrypted stored answer must equal the supplied one exactly (case sensitive)
    - SHA-256 of the decrypted answer must equal the stored signature,
      which catches a substituted ciphertext
    - All-or-nothing: the first failure aborts; nothing is written
    """

    def __init__(self, uow: UnitOfWork, cipher: FieldCipher):
        self.uow = uow
        self.cipher = cipher

    async def execute(
        self, user_id: int, answers: List[AnswerSubmission]
    ) -> Result[VerificationResult]:
        try:
            return await self._verify(user_id, answers)
        except SQLAlchemyError as exc:
            return Return.err(storage_error(exc, "Unable to verify answers"))

    async def _verify(
        self, user_id: int, answers: List[AnswerSubmission]
    ) -> Result[VerificationResult]:
        async with self.uow:
            key_pair = await self.uow.key_pairs.get_by_user_id(user_id)
            if key_pair is None:
                return Return.err(Error(ErrorCode.KEYS_NOT_FOUND, "User keys not found"))

            if not answers:
                return Return.err(
                    Error(ErrorCode.NO_ANSWERS_PROVIDED, "At least one answer is required")
                )

            private_key = self.cipher.decrypt_field_strict(key_pair.encrypted_private_key)
            if private_key.is_err():
                logger.error(f"Private key for user {user_id} could not be decrypted")
                return Return.err(private_key.error)

            stored = await self.uow.security_questions.get_by_ids_for_user(
                user_id, [a.question_id for a in answers]
            )
            stored_by_id = {q.id: q for q in stored}

            for submission in answers:
                record = stored_by_id.get(submission.question_id)
                if record is None:
                    return Return.err(
                        Error(ErrorCode.INVALID_QUESTION_ID, "Invalid question ID")
                    )

                try:
                    decrypted = asymmetric_decrypt(private_key.value, record.encrypted_answer)
                except (TypeError, ValueError) as exc:
                    logger.error(f"Stored answer {record.id} could not be decrypted: {type(exc).__name__}")
                    return Return.err(
                        Error(ErrorCode.INTERNAL_ERROR, "Unable to verify answers")
                    )

                if not secrets.compare_digest(decrypted.encode(), submission.answer.encode()):
                    return Return.err(Error(ErrorCode.ANSWER_MISMATCH, "Answer mismatch"))

                digest = hashlib.sha256(decrypted.encode()).hexdigest()
                if not secrets.compare_digest(digest, record.signature):
                    return Return.err(
                        Error(ErrorCode.SIGNATURE_MISMATCH, "Signature mismatch")
                    )

            return Return.ok(VerificationResult(verified=True, verified_count=len(answers)))
