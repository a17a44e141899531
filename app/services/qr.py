import logging
import secrets
from datetime import datetime, timezone, timedelta
from typing import Tuple

from jose import jwt, JWTError
from sqlalchemy.orm import Session

from app.config import config
from app.crud import check_in as check_in_crud
from app.crud import subscription as subscription_crud
from app.crud import user as user_crud
from app.errors.booking_errors import UserNotFound, AccountInactive
from app.errors.check_in_errors import QRTokenInvalid, QRTokenExpired, VisitLimitReached
from app.models import User, PlanTier
from app.schemas.check_in import QRMintResponse, QRVerification
from app.services.entitlement import evaluate_entitlement
from app.utils.clock import Clock, utcnow, month_bounds

logger = logging.getLogger(__name__)

QR_TOKEN_TYPE = "qr"


class QRService:
    """
    Issues and verifies the short-lived tokens members show at the front desk.

    A token is an HS256 JWT carrying the member id, the issue time and a random
    nonce. It has no `exp` claim: expiry is evaluated against the service clock
    when the token is scanned.
    """

    def __init__(self, db: Session, clock: Clock = utcnow):
        self.db = db
        self.clock = clock

    @property
    def ttl(self) -> timedelta:
        return timedelta(minutes=config.QR_TOKEN_TTL_MINUTES)

    def mint(self, user_id: int) -> QRMintResponse:
        user = user_crud.get_user(self.db, user_id)
        if not user:
            raise UserNotFound(user_id)
        if not user.is_active:
            raise AccountInactive("Your account is not active. Please contact reception.")

        now = self.clock()
        claims = {
            "sub": str(user.id),
            "iat": int(now.timestamp()),
            "jti": secrets.token_hex(8),
            "typ": QR_TOKEN_TYPE,
        }
        token = jwt.encode(claims, config.qr_signing_key, algorithm=config.JWT_ALGORITHM)
        generated_at = datetime.fromtimestamp(claims["iat"], tz=timezone.utc)

        logger.info(f"QR token issued for user {user.id}")
        return QRMintResponse(
            qr_code=token,
            user_id=user.id,
            user_name=user.display_name,
            generated_at=generated_at,
            expires_at=generated_at + self.ttl,
        )

    def verify(self, token: str) -> QRVerification:
        verification, _ = self.verify_in_session(self.db, token)
        return verification

    def verify_in_session(self, session: Session, token: str) -> Tuple[QRVerification, str]:
        """
        Runs the full verification and returns the result with the token nonce.

        Raises QRTokenInvalid, QRTokenExpired, UserNotFound, AccountInactive
        (identity in `data`) or VisitLimitReached (identity and usage in `data`).
        """
        user_id, issued_at, nonce = self.decode(token)

        user = user_crud.get_user(session, user_id)
        if not user:
            raise UserNotFound(user_id)

        verification = self._identity(user, issued_at)
        if not user.is_active:
            verification.reason = "Account is not active"
            logger.warning(f"QR scan refused for inactive user {user.id}")
            raise AccountInactive(data=verification.model_dump(mode="json"))

        # The active subscription's plan decides the tier; the stored label only covers members without one
        subscription = subscription_crud.get_active_subscription(session, user.id)
        if subscription:
            verification.remaining_visits = subscription.remaining_visits
            if subscription.plan:
                verification.membership_type = subscription.plan.tier

        now = self.clock()
        start, end = month_bounds(now)
        monthly_count = check_in_crud.count_user_check_ins_between(session, user.id, start, end)
        entitlement = evaluate_entitlement(verification.membership_type, monthly_count)
        verification.entitlement = entitlement
        if entitlement.unknown_plan:
            logger.warning(f"User {user.id} has no recognised membership type")

        if not entitlement.allowed:
            verification.reason = entitlement.message
            logger.warning(f"QR scan refused for user {user.id}: {entitlement.message}")
            raise VisitLimitReached(entitlement.message, data=verification.model_dump(mode="json"))

        return verification, nonce

    def decode(self, token: str) -> Tuple[int, datetime, str]:
        """Returns (user id, issue time, nonce) of a well-formed token that is still within its window."""
        try:
            claims = jwt.decode(
                token,
                config.qr_signing_key,
                algorithms=[config.JWT_ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError as e:
            logger.warning(f"Rejected malformed QR token: {e}")
            raise QRTokenInvalid()

        if claims.get("typ") != QR_TOKEN_TYPE:
            raise QRTokenInvalid()
        try:
            user_id = int(claims["sub"])
            issued_at = datetime.fromtimestamp(int(claims["iat"]), tz=timezone.utc)
            nonce = str(claims["jti"])
        except (KeyError, TypeError, ValueError):
            raise QRTokenInvalid()

        if self.clock() - issued_at > self.ttl:
            logger.warning(f"Expired QR token presented for user {user_id}")
            raise QRTokenExpired()

        return user_id, issued_at, nonce

    def _identity(self, user: User, issued_at: datetime) -> QRVerification:
        return QRVerification(
            user_id=user.id,
            first_name=user.first_name,
            last_name=user.last_name or "",
            email=user.email,
            account_status=user.status,
            membership_type=user.membership_type or PlanTier.UNKNOWN,
            qr_generated_at=issued_at,
        )
