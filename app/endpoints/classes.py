import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.permissions import get_current_user, ensure_self_or_staff, CATALOG_EDITORS, STAFF
from app.dependencies import get_db
from app.models import ClassStatus, Difficulty, UserRole
from app.schemas.booking import ClassBookingRequest, BookingResult
from app.schemas.common import ApiResponse
from app.schemas.gym_class import GymClassCreate, GymClassUpdate, GymClassResponse, GymClassDetail
from app.services.booking import BookingService
from app.services.class_catalog import ClassService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/classes", tags=["Classes"])

CLASS_BOOKERS = [UserRole.MEMBER.value] + STAFF


@router.get("", response_model=ApiResponse[List[GymClassResponse]])
def list_classes_endpoint(
        status: Optional[ClassStatus] = None,
        difficulty: Optional[Difficulty] = None,
        current_user: dict = Depends(get_current_user()),
        db: Session = Depends(get_db),
):
    classes = ClassService(db).list_classes(status=status, difficulty=difficulty)
    return ApiResponse(data=[GymClassResponse.model_validate(gym_class) for gym_class in classes])


@router.get("/{class_id}", response_model=ApiResponse[GymClassDetail])
def get_class_endpoint(
        class_id: int,
        current_user: dict = Depends(get_current_user()),
        db: Session = Depends(get_db),
):
    return ApiResponse(data=GymClassDetail.model_validate(ClassService(db).get_class(class_id)))


@router.post("", response_model=ApiResponse[GymClassDetail], status_code=201)
def create_class_endpoint(
        class_data: GymClassCreate,
        current_user: dict = Depends(get_current_user(CATALOG_EDITORS)),
        db: Session = Depends(get_db),
):
    gym_class = ClassService(db).create_class(class_data)
    return ApiResponse(message="Class created successfully", data=GymClassDetail.model_validate(gym_class))


@router.put("/{class_id}", response_model=ApiResponse[GymClassDetail])
def update_class_endpoint(
        class_id: int,
        class_data: GymClassUpdate,
        current_user: dict = Depends(get_current_user(CATALOG_EDITORS)),
        db: Session = Depends(get_db),
):
    gym_class = ClassService(db).update_class(class_id, class_data)
    return ApiResponse(message="Class updated successfully", data=GymClassDetail.model_validate(gym_class))


@router.delete("/{class_id}", response_model=ApiResponse[None])
def delete_class_endpoint(
        class_id: int,
        force: bool = False,
        current_user: dict = Depends(get_current_user(CATALOG_EDITORS)),
        db: Session = Depends(get_db),
):
    ClassService(db).delete_class(class_id, force=force)
    return ApiResponse(message="Class deleted successfully")


# Запись на занятие по дате и времени начала
@router.post("/{class_id}/book", response_model=ApiResponse[BookingResult], status_code=201)
def book_class_endpoint(
        class_id: int,
        booking_data: ClassBookingRequest,
        current_user: dict = Depends(get_current_user(CLASS_BOOKERS)),
        db: Session = Depends(get_db),
):
    member_id = booking_data.member_id or current_user["id"]
    ensure_self_or_staff(current_user, member_id)
    result = BookingService(db).book_class_at(
        member_id,
        class_id,
        booking_data.booking_date,
        booking_data.start_time,
    )
    return ApiResponse(message="Class booked successfully", data=result)
