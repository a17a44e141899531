import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.permissions import get_current_user, CATALOG_EDITORS
from app.dependencies import get_db
from app.models import InstructorStatus
from app.schemas.common import ApiResponse
from app.schemas.gym_class import InstructorCreate, InstructorUpdate, InstructorResponse
from app.services.class_catalog import InstructorService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/instructors", tags=["Instructors"])


@router.get("", response_model=ApiResponse[List[InstructorResponse]])
def list_instructors_endpoint(
        status: Optional[InstructorStatus] = None,
        current_user: dict = Depends(get_current_user()),
        db: Session = Depends(get_db),
):
    instructors = InstructorService(db).list_instructors(status=status)
    return ApiResponse(data=[InstructorResponse.model_validate(instructor) for instructor in instructors])


@router.get("/{instructor_id}", response_model=ApiResponse[InstructorResponse])
def get_instructor_endpoint(
        instructor_id: int,
        current_user: dict = Depends(get_current_user()),
        db: Session = Depends(get_db),
):
    instructor = InstructorService(db).get_instructor(instructor_id)
    return ApiResponse(data=InstructorResponse.model_validate(instructor))


@router.post("", response_model=ApiResponse[InstructorResponse], status_code=201)
def create_instructor_endpoint(
        instructor_data: InstructorCreate,
        current_user: dict = Depends(get_current_user(CATALOG_EDITORS)),
        db: Session = Depends(get_db),
):
    instructor = InstructorService(db).create_instructor(instructor_data)
    return ApiResponse(message="Instructor created successfully", data=InstructorResponse.model_validate(instructor))


@router.put("/{instructor_id}", response_model=ApiResponse[InstructorResponse])
def update_instructor_endpoint(
        instructor_id: int,
        instructor_data: InstructorUpdate,
        current_user: dict = Depends(get_current_user(CATALOG_EDITORS)),
        db: Session = Depends(get_db),
):
    instructor = InstructorService(db).update_instructor(instructor_id, instructor_data)
    return ApiResponse(message="Instructor updated successfully", data=InstructorResponse.model_validate(instructor))


@router.delete("/{instructor_id}", response_model=ApiResponse[None])
def delete_instructor_endpoint(
        instructor_id: int,
        current_user: dict = Depends(get_current_user(CATALOG_EDITORS)),
        db: Session = Depends(get_db),
):
    InstructorService(db).delete_instructor(instructor_id)
    return ApiResponse(message="Instructor deleted successfully")
