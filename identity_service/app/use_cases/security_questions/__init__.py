"""
Security Question Use Cases

Key enrollment and the challenge/response fallback.
"""

from .register_keys_use_case import RegisterKeysUseCase
from .add_security_question_use_case import AddSecurityQuestionUseCase
from .get_security_questions_use_case import GetSecurityQuestionsUseCase
from .verify_security_answers_use_case import VerifySecurityAnswersUseCase
from .dtos import AnswerSubmission, KeysRegistered, QuestionInfo, VerificationResult

__all__ = [
    # Use Cases
    "RegisterKeysUseCase",
    "AddSecurityQuestionUseCase",
    "GetSecurityQuestionsUseCase",
    "VerifySecurityAnswersUseCase",
    # DTOs
    "AnswerSubmission",
    "KeysRegistered",
    "QuestionInfo",
    "VerificationResult",
]
