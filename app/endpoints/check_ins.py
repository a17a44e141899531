import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.auth.permissions import get_current_user, ensure_self_or_staff, STAFF
from app.dependencies import get_db
from app.schemas.check_in import CheckInCreate, CheckInResponse, CheckInResult, CheckInStatistics
from app.schemas.common import ApiResponse
from app.services.check_in import CheckInService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/check-ins", tags=["Check-ins"])


# Отметка посещения на ресепшене
@router.post("", response_model=ApiResponse[CheckInResult], status_code=201)
def create_check_in_endpoint(
        check_in_data: CheckInCreate,
        current_user: dict = Depends(get_current_user(STAFF)),
        db: Session = Depends(get_db),
):
    result = CheckInService(db).create_check_in(
        check_in_data.user_id,
        location_id=check_in_data.location_id,
        notes=check_in_data.notes,
        qr_token=check_in_data.qr_code,
        recorded_by_id=current_user["id"],
    )
    return ApiResponse(message="Check-in recorded successfully", data=result)


@router.get("", response_model=ApiResponse[List[CheckInResponse]])
def list_check_ins_endpoint(
        user_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        location_id: Optional[str] = None,
        current_user: dict = Depends(get_current_user(STAFF)),
        db: Session = Depends(get_db),
):
    check_ins = CheckInService(db).list_check_ins(user_id=user_id, start=start, end=end, location_id=location_id)
    return ApiResponse(data=[CheckInResponse.model_validate(check_in) for check_in in check_ins])


@router.get("/stats", response_model=ApiResponse[CheckInStatistics])
def check_in_statistics_endpoint(
        user_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        current_user: dict = Depends(get_current_user(STAFF)),
        db: Session = Depends(get_db),
):
    return ApiResponse(data=CheckInService(db).get_statistics(user_id=user_id, start=start, end=end))


@router.get("/user/{user_id}", response_model=ApiResponse[List[CheckInResponse]])
def user_check_ins_endpoint(
        user_id: int,
        limit: int = Query(50, ge=1, le=500),
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        current_user: dict = Depends(get_current_user()),
        db: Session = Depends(get_db),
):
    ensure_self_or_staff(current_user, user_id)
    check_ins = CheckInService(db).list_user_check_ins(user_id, limit=limit, start=start, end=end)
    return ApiResponse(data=[CheckInResponse.model_validate(check_in) for check_in in check_ins])
