import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.permissions import get_current_user, STAFF
from app.dependencies import get_db
from app.schemas.check_in import QRMintResponse, QRVerifyRequest, QRVerification
from app.schemas.common import ApiResponse
from app.services.qr import QRService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/qr", tags=["QR"])


# QR-код для входа выдаётся только на себя
@router.post("/mint", response_model=ApiResponse[QRMintResponse])
def mint_qr_endpoint(
        current_user: dict = Depends(get_current_user()),
        db: Session = Depends(get_db),
):
    return ApiResponse(data=QRService(db).mint(current_user["id"]))


@router.post("/verify", response_model=ApiResponse[QRVerification])
def verify_qr_endpoint(
        verify_data: QRVerifyRequest,
        current_user: dict = Depends(get_current_user(STAFF)),
        db: Session = Depends(get_db),
):
    verification = QRService(db).verify(verify_data.qr_code)
    return ApiResponse(message="QR code verified successfully", data=verification)
