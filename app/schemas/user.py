from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr

from app.models.user import UserRole, AccountStatus
from app.models.plan import PlanTier


class UserBrief(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: EmailStr
    phone: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserResponse(UserBrief):
    role: UserRole
    status: AccountStatus
    membership_type: Optional[PlanTier] = None
