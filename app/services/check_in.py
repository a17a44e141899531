import logging
from collections import Counter
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.crud import check_in as crud
from app.crud import user as user_crud
from app.database import transactional
from app.errors.booking_errors import UserNotFound, AccountInactive
from app.errors.check_in_errors import QRTokenAlreadyUsed
from app.errors.gym_errors import Invalid
from app.models import CheckIn, CheckInMethod
from app.schemas.check_in import CheckInResponse, CheckInResult, CheckInStatistics
from app.services.qr import QRService
from app.services.subscription import SubscriptionService
from app.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)


class CheckInService:
    def __init__(self, db: Session, clock: Clock = utcnow):
        self.db = db
        self.clock = clock
        self.qr_service = QRService(db, clock)
        self.subscription_service = SubscriptionService(db, clock)

    # --- Public Methods (Transactional) ---

    def create_check_in(
        self,
        user_id: int,
        location_id: Optional[str] = None,
        notes: Optional[str] = None,
        qr_token: Optional[str] = None,
        recorded_by_id: Optional[int] = None,
    ) -> CheckInResult:
        """
        Records a visit and takes it off the member's active subscription.

        A missing active subscription does not block the visit: the quota is
        enforced when the QR code is verified, and here it only produces a
        warning in the result.
        """
        try:
            with transactional(self.db) as session:
                result = self._create_check_in_logic(
                    session,
                    user_id=user_id,
                    location_id=location_id,
                    notes=notes,
                    qr_token=qr_token,
                    recorded_by_id=recorded_by_id,
                )
        except IntegrityError:
            # Two desks scanned the same code at once
            raise QRTokenAlreadyUsed()

        logger.info(
            f"Check-in {result.check_in.id} recorded for user {user_id} "
            f"({result.check_in.method.value}), remaining visits: {result.remaining_visits}"
        )
        return result

    # --- Reads ---

    def list_check_ins(
        self,
        user_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        location_id: Optional[str] = None,
    ) -> List[CheckIn]:
        return crud.get_check_ins(self.db, user_id=user_id, start=start, end=end, location_id=location_id)

    def list_user_check_ins(
        self,
        user_id: int,
        limit: int = 50,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[CheckIn]:
        if not user_crud.get_user(self.db, user_id):
            raise UserNotFound(user_id)
        return crud.get_check_ins(self.db, user_id=user_id, start=start, end=end, limit=limit)

    def get_statistics(
        self,
        user_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> CheckInStatistics:
        check_ins = crud.get_check_ins(self.db, user_id=user_id, start=start, end=end)

        hours = Counter(check_in.check_in_time.hour for check_in in check_ins)
        peak_hour, peak_count = None, 0
        if hours:
            # Earliest hour wins a tie
            peak_hour, peak_count = min(hours.items(), key=lambda item: (-item[1], item[0]))

        return CheckInStatistics(
            total_check_ins=len(check_ins),
            unique_users=len({check_in.user_id for check_in in check_ins}),
            peak_hour=peak_hour,
            peak_hour_count=peak_count,
            hourly_distribution=dict(sorted(hours.items())),
        )

    # --- Private Logic Methods (Non-Transactional) ---

    def _create_check_in_logic(
        self,
        session: Session,
        *,
        user_id: int,
        location_id: Optional[str],
        notes: Optional[str],
        qr_token: Optional[str],
        recorded_by_id: Optional[int],
    ) -> CheckInResult:
        nonce = None
        if qr_token:
            verification, nonce = self.qr_service.verify_in_session(session, qr_token)
            if verification.user_id != user_id:
                raise Invalid("QR code does not belong to this member")
            if crud.get_check_in_by_token(session, nonce):
                raise QRTokenAlreadyUsed()

        user = user_crud.get_user(session, user_id)
        if not user:
            raise UserNotFound(user_id)
        if not user.is_active:
            raise AccountInactive()

        warning = None
        remaining_visits = None
        subscription_status = None
        subscription = self.subscription_service.get_active_subscription(session, user_id, for_update=True)
        if subscription:
            self.subscription_service.consume_visit(session, subscription)
            remaining_visits = subscription.remaining_visits
            subscription_status = subscription.status.value
        else:
            warning = "No active subscription found. Visit recorded without deduction."
            logger.warning(f"User {user_id} checked in without an active subscription")

        check_in = crud.create_check_in(
            session,
            user_id=user_id,
            check_in_time=self.clock(),
            method=CheckInMethod.QR if qr_token else CheckInMethod.MANUAL,
            location_id=location_id,
            notes=notes,
            qr_token_id=nonce,
            recorded_by_id=recorded_by_id,
        )

        return CheckInResult(
            check_in=CheckInResponse.model_validate(check_in),
            user_name=user.display_name,
            remaining_visits=remaining_visits,
            subscription_status=subscription_status,
            warning=warning,
        )
