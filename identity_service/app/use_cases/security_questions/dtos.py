"""
Security Question Use Case DTOs
"""

from pydantic import BaseModel


class KeysRegistered(BaseModel):
    """Response for key pair registration (public half only)"""

    user_id: int
    public_key: str


class QuestionInfo(BaseModel):
    """A registered question, without its answer"""

    id: int
    question: str


class AnswerSubmission(BaseModel):
    """One answer presented for verification"""

    question_id: int
    answer: str


class VerificationResult(BaseModel):
    """Response for a fully successful verification"""

    verified: bool
    verified_count: int
