from abc import ABC, abstractmethod
from typing import Optional

from identity_service.domain.entities import KeyPair


class IKeyPairRepository(ABC):
    """Key pair repository interface - application layer"""

    @abstractmethod
    async def get_by_user_id(self, user_id: int) -> Optional[KeyPair]:
        """Get the key pair registered for a user"""
        pass

    @abstractmethod
    async def create(self, key_pair: KeyPair) -> KeyPair:
        """Create a new key pair"""
        pass
