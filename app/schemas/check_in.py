from datetime import datetime
from typing import Optional, Dict

from pydantic import BaseModel, ConfigDict, Field

from app.models.check_in import CheckInMethod
from app.models.plan import PlanTier
from app.models.user import AccountStatus


class Entitlement(BaseModel):
    allowed: bool
    tier: PlanTier
    monthly_count: int
    monthly_limit: Optional[int] = None
    remaining_this_month: Optional[int] = None
    unknown_plan: bool = False
    message: str


class QRMintResponse(BaseModel):
    qr_code: str
    user_id: int
    user_name: str
    generated_at: datetime
    expires_at: datetime


class QRVerifyRequest(BaseModel):
    qr_code: str = Field(..., alias="qrCode", min_length=1)

    model_config = ConfigDict(populate_by_name=True)


class QRVerification(BaseModel):
    user_id: int
    first_name: str
    last_name: str
    email: str
    account_status: AccountStatus
    membership_type: PlanTier
    qr_generated_at: datetime
    entitlement: Optional[Entitlement] = None
    remaining_visits: Optional[int] = None
    reason: Optional[str] = None


class CheckInCreate(BaseModel):
    user_id: int = Field(..., alias="userId")
    location_id: Optional[str] = Field(None, alias="locationId")
    notes: Optional[str] = None
    qr_code: Optional[str] = Field(None, alias="qrCode")

    model_config = ConfigDict(populate_by_name=True)


class CheckInResponse(BaseModel):
    id: int
    user_id: int
    check_in_time: datetime
    method: CheckInMethod
    location_id: Optional[str] = None
    notes: Optional[str] = None
    recorded_by_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class CheckInResult(BaseModel):
    check_in: CheckInResponse
    user_name: str
    remaining_visits: Optional[int] = None
    subscription_status: Optional[str] = None
    warning: Optional[str] = None


class CheckInStatistics(BaseModel):
    total_check_ins: int
    unique_users: int
    peak_hour: Optional[int] = None
    peak_hour_count: int = 0
    hourly_distribution: Dict[int, int]
