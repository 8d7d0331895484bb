from abc import ABC, abstractmethod
from typing import List

from identity_service.domain.entities import SecurityQuestion


class ISecurityQuestionRepository(ABC):
    """Security question repository interface - application layer"""

    @abstractmethod
    async def create(self, question: SecurityQuestion) -> SecurityQuestion:
        """Create a new security question"""
        pass

    @abstractmethod
    async def get_by_user_id(self, user_id: int) -> List[SecurityQuestion]:
        """Get all questions registered by a user"""
        pass

    @abstractmethod
    async def get_by_ids_for_user(
        self, user_id: int, question_ids: List[int]
    ) -> List[SecurityQuestion]:
        """Get the user's questions among the given IDs"""
        pass
