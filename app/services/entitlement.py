from typing import Optional

from app.config import config
from app.models.plan import PlanTier
from app.schemas.check_in import Entitlement


def monthly_cap_for(tier: PlanTier) -> Optional[int]:
    """Hard monthly visit cap of a tier, None when visits are not capped per month."""
    if tier == PlanTier.MONTHLY_LIMITED:
        return config.LIMITED_PLAN_MONTHLY_VISITS
    return None


def evaluate_entitlement(tier: PlanTier, monthly_count: int) -> Entitlement:
    """
    Decides whether a member on `tier` who already checked in `monthly_count`
    times this calendar month may check in again.
    """
    cap = monthly_cap_for(tier)

    if cap is not None:
        remaining = max(cap - monthly_count, 0)
        if monthly_count >= cap:
            return Entitlement(
                allowed=False,
                tier=tier,
                monthly_count=monthly_count,
                monthly_limit=cap,
                remaining_this_month=0,
                message=f"Monthly visit limit reached ({monthly_count}/{cap})",
            )
        return Entitlement(
            allowed=True,
            tier=tier,
            monthly_count=monthly_count,
            monthly_limit=cap,
            remaining_this_month=remaining,
            message=f"{remaining} of {cap} visits left this month",
        )

    if tier == PlanTier.MONTHLY_UNLIMITED:
        message = "Unlimited visits"
    elif tier == PlanTier.SINGLE_VISIT:
        message = "Single visit plan"
    else:
        message = "Unknown membership type"

    return Entitlement(
        allowed=True,
        tier=tier,
        monthly_count=monthly_count,
        unknown_plan=tier == PlanTier.UNKNOWN,
        message=message,
    )
