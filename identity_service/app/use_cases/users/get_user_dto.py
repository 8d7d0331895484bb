from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class UserProfile(BaseModel):
    """User profile as shown to administrators"""

    user_id: int
    user_type: str
    admin_role: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    created_at: datetime
