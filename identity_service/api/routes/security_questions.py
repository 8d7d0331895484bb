from typing import List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from identity_service.api.error import ClientError, server_error
from identity_service.api.utils.encryption import FieldCipher
from identity_service.app.services.unit_of_work import UnitOfWork
from identity_service.app.use_cases.security_questions import (
    AddSecurityQuestionUseCase,
    AnswerSubmission,
    GetSecurityQuestionsUseCase,
    KeysRegistered,
    QuestionInfo,
    RegisterKeysUseCase,
    VerificationResult,
    VerifySecurityAnswersUseCase,
)
from identity_service.depends import get_field_cipher, get_unit_of_work
from identity_service.domain.entities import ErrorCode
from identity_service.libs.result import Error

router = APIRouter(prefix="/biometric-fallback", tags=["Security Questions"])

# RSA-2048 OAEP/SHA-256 caps plaintext at 190 bytes
MAX_ANSWER_LENGTH = 40

VERIFY_FAILURE_CODES = (
    ErrorCode.INVALID_QUESTION_ID,
    ErrorCode.ANSWER_MISMATCH,
    ErrorCode.SIGNATURE_MISMATCH,
    ErrorCode.NO_ANSWERS_PROVIDED,
)


def _raise_for(error: Error):
    if error.code in (ErrorCode.KEYS_NOT_FOUND, ErrorCode.USER_NOT_FOUND):
        raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
    elif error.code == ErrorCode.KEYS_ALREADY_REGISTERED:
        raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
    elif error.code in VERIFY_FAILURE_CODES:
        raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
    raise server_error(error)


class AddQuestionRequest(BaseModel):
    question: str = Field(..., min_length=1, max_length=500)
    answer: str = Field(..., min_length=1, max_length=MAX_ANSWER_LENGTH)


class QuestionsResponse(BaseModel):
    questions: List[QuestionInfo]


class VerifyAnswersRequest(BaseModel):
    answers: List[AnswerSubmission] = Field(..., min_length=1)


@router.post(
    "/register-keys/{user_id}",
    status_code=status.HTTP_201_CREATED,
    response_model=KeysRegistered,
)
async def register_keys(
    user_id: int,
    uow: UnitOfWork = Depends(get_unit_of_work),
    cipher: FieldCipher = Depends(get_field_cipher),
):
    """
    Register Key Pair

    Generates the user's RSA-2048 pair. Only the public key is returned.

    Raises:
        - 404 Not Found: User not found
        - 409 Conflict: Keys already registered
    """
    result = await RegisterKeysUseCase(uow, cipher).execute(user_id)
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.post(
    "/add-question/{user_id}",
    status_code=status.HTTP_201_CREATED,
    response_model=QuestionInfo,
)
async def add_question(
    user_id: int,
    request: AddQuestionRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Add Security Question

    Raises:
        - 404 Not Found: Keys not registered
    """
    result = await AddSecurityQuestionUseCase(uow).execute(
        user_id, request.question, request.answer
    )
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.get(
    "/questions/{user_id}",
    status_code=status.HTTP_200_OK,
    response_model=QuestionsResponse,
)
async def get_questions(user_id: int, uow: UnitOfWork = Depends(get_unit_of_work)):
    """List a user's security questions (never the answers)"""
    result = await GetSecurityQuestionsUseCase(uow).execute(user_id)
    if result.is_err():
        _raise_for(result.error)
    return QuestionsResponse(questions=result.value)


@router.post(
    "/verify/{user_id}",
    status_code=status.HTTP_200_OK,
    response_model=VerificationResult,
)
async def verify_answers(
    user_id: int,
    request: VerifyAnswersRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    cipher: FieldCipher = Depends(get_field_cipher),
):
    """
    Verify Security Answers

    All-or-nothing: any wrong answer fails the whole call.

    Raises:
        - 400 Bad Request: Invalid question id, answer mismatch, signature mismatch
        - 404 Not Found: Keys not registered
    """
    result = await VerifySecurityAnswersUseCase(uow, cipher).execute(
        user_id, request.answers
    )
    if result.is_err():
        _raise_for(result.error)
    return result.value
