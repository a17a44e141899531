import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.auth.permissions import get_current_user, ensure_self_or_staff, STAFF
from app.dependencies import get_db
from app.models import BookingStatus
from app.schemas.booking import (
    BookingCreate,
    BookingCancelRequest,
    BookingResponse,
    BookingDetail,
    BookingResult,
    BookingCancelResult,
)
from app.schemas.common import ApiResponse
from app.services.booking import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])


# Запись на слот. Участник может записать только себя
@router.post("", response_model=ApiResponse[BookingResult], status_code=201)
def create_booking_endpoint(
        booking_data: BookingCreate,
        current_user: dict = Depends(get_current_user()),
        db: Session = Depends(get_db),
):
    ensure_self_or_staff(current_user, booking_data.user_id)
    result = BookingService(db).book_slot(
        booking_data.user_id,
        booking_data.schedule_slot_id,
        booking_data.booking_date,
    )
    return ApiResponse(message="Class booked successfully", data=result)


@router.get("", response_model=ApiResponse[List[BookingDetail]])
def list_bookings_endpoint(
        status: Optional[BookingStatus] = None,
        booking_date: Optional[date] = Query(None, alias="date"),
        schedule_slot_id: Optional[int] = None,
        current_user: dict = Depends(get_current_user(STAFF)),
        db: Session = Depends(get_db),
):
    bookings = BookingService(db).list_all(status=status, booking_date=booking_date, schedule_slot_id=schedule_slot_id)
    return ApiResponse(data=[BookingDetail.model_validate(booking) for booking in bookings])


@router.get("/user/{user_id}", response_model=ApiResponse[List[BookingDetail]])
def user_bookings_endpoint(
        user_id: int,
        status: Optional[BookingStatus] = None,
        upcoming: bool = False,
        current_user: dict = Depends(get_current_user()),
        db: Session = Depends(get_db),
):
    ensure_self_or_staff(current_user, user_id)
    bookings = BookingService(db).list_for_user(user_id, status=status, upcoming=upcoming)
    return ApiResponse(data=[BookingDetail.model_validate(booking) for booking in bookings])


# Отмена записи. Права владельца или персонала проверяет сервис
@router.post("/{booking_id}/cancel", response_model=ApiResponse[BookingCancelResult])
def cancel_booking_endpoint(
        booking_id: int,
        cancel_data: BookingCancelRequest,
        current_user: dict = Depends(get_current_user()),
        db: Session = Depends(get_db),
):
    ensure_self_or_staff(current_user, cancel_data.user_id)
    result = BookingService(db).cancel_booking(booking_id, current_user["id"])
    return ApiResponse(message="Booking cancelled successfully", data=result)


@router.post("/{booking_id}/attended", response_model=ApiResponse[BookingResponse])
def mark_attended_endpoint(
        booking_id: int,
        current_user: dict = Depends(get_current_user(STAFF)),
        db: Session = Depends(get_db),
):
    booking = BookingService(db).mark_attended(booking_id)
    return ApiResponse(data=BookingResponse.model_validate(booking))


@router.post("/{booking_id}/no-show", response_model=ApiResponse[BookingResponse])
def mark_no_show_endpoint(
        booking_id: int,
        current_user: dict = Depends(get_current_user(STAFF)),
        db: Session = Depends(get_db),
):
    booking = BookingService(db).mark_no_show(booking_id)
    return ApiResponse(data=BookingResponse.model_validate(booking))
