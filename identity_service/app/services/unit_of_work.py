from abc import ABC, abstractmethod

from identity_service.app.repositories.key_pair_repository import IKeyPairRepository
from identity_service.app.repositories.security_question_repository import (
    ISecurityQuestionRepository,
)
from identity_service.app.repositories.session_repository import ISessionRepository
from identity_service.app.repositories.user_repository import IUserRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    users: IUserRepository
    sessions: ISessionRepository
    key_pairs: IKeyPairRepository
    security_questions: ISecurityQuestionRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
