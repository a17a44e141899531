import logging
from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.auth.permissions import get_current_user, STAFF
from app.dependencies import get_db
from app.models import SlotStatus, UserRole
from app.schemas.common import ApiResponse
from app.schemas.schedule import (
    ScheduleSlotCreate,
    ScheduleSlotUpdate,
    ScheduleSlotResponse,
    ScheduleSlotWithEnrollment,
    SlotCancelRequest,
    SlotCancelResult,
    RosterEntry,
)
from app.services.schedule import ScheduleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schedule", tags=["Schedule"])

ROSTER_VIEWERS = STAFF + [UserRole.INSTRUCTOR.value]


# Список слотов расписания с текущей загрузкой
@router.get("", response_model=ApiResponse[List[ScheduleSlotWithEnrollment]])
def list_slots_endpoint(
        day_of_week: Optional[int] = Query(None, ge=0, le=6),
        class_id: Optional[int] = None,
        instructor_id: Optional[int] = None,
        status: Optional[SlotStatus] = None,
        current_user: dict = Depends(get_current_user()),
        db: Session = Depends(get_db),
):
    slots = ScheduleService(db).list_slots(
        day_of_week=day_of_week,
        class_id=class_id,
        instructor_id=instructor_id,
        status=status,
    )
    return ApiResponse(data=slots)


@router.get("/weekly", response_model=ApiResponse[Dict[str, List[ScheduleSlotWithEnrollment]]])
def weekly_schedule_endpoint(
        current_user: dict = Depends(get_current_user()),
        db: Session = Depends(get_db),
):
    return ApiResponse(data=ScheduleService(db).weekly_schedule())


@router.get("/{slot_id}", response_model=ApiResponse[ScheduleSlotResponse])
def get_slot_endpoint(
        slot_id: int,
        current_user: dict = Depends(get_current_user()),
        db: Session = Depends(get_db),
):
    slot = ScheduleService(db).get_slot(slot_id)
    return ApiResponse(data=ScheduleSlotResponse.model_validate(slot))


# Список записавшихся на слот (на дату или на все даты)
@router.get("/{slot_id}/bookings", response_model=ApiResponse[List[RosterEntry]])
def slot_roster_endpoint(
        slot_id: int,
        booking_date: Optional[date] = Query(None, alias="date"),
        current_user: dict = Depends(get_current_user(ROSTER_VIEWERS)),
        db: Session = Depends(get_db),
):
    return ApiResponse(data=ScheduleService(db).slot_roster(slot_id, booking_date))


@router.post("", response_model=ApiResponse[ScheduleSlotResponse], status_code=201)
def create_slot_endpoint(
        slot_data: ScheduleSlotCreate,
        current_user: dict = Depends(get_current_user(STAFF)),
        db: Session = Depends(get_db),
):
    slot = ScheduleService(db).create_slot(slot_data)
    return ApiResponse(message="Schedule slot created", data=ScheduleSlotResponse.model_validate(slot))


@router.put("/{slot_id}", response_model=ApiResponse[ScheduleSlotResponse])
def update_slot_endpoint(
        slot_id: int,
        update_data: ScheduleSlotUpdate,
        current_user: dict = Depends(get_current_user(STAFF)),
        db: Session = Depends(get_db),
):
    slot = ScheduleService(db).update_slot(slot_id, update_data)
    return ApiResponse(message="Schedule slot updated", data=ScheduleSlotResponse.model_validate(slot))


@router.delete("/{slot_id}", response_model=ApiResponse[None])
def delete_slot_endpoint(
        slot_id: int,
        current_user: dict = Depends(get_current_user(STAFF)),
        db: Session = Depends(get_db),
):
    ScheduleService(db).delete_slot(slot_id)
    return ApiResponse(message="Schedule slot deleted")


# Отмена слота вместе со всеми подтверждёнными записями
@router.post("/{slot_id}/cancel", response_model=ApiResponse[SlotCancelResult])
def cancel_slot_endpoint(
        slot_id: int,
        cancel_data: Optional[SlotCancelRequest] = None,
        current_user: dict = Depends(get_current_user(STAFF)),
        db: Session = Depends(get_db),
):
    reason = cancel_data.reason if cancel_data else None
    result = ScheduleService(db).cancel_slot(slot_id, reason)
    return ApiResponse(
        message=f"Class cancelled. {result.cancelled_bookings} bookings were cancelled.",
        data=result,
    )
