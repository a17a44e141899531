import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.permissions import get_current_user, ensure_self_or_staff, STAFF
from app.dependencies import get_db
from app.schemas.common import ApiResponse
from app.schemas.subscription import (
    PlanCreate,
    PlanResponse,
    SubscriptionCreate,
    SubscriptionRenew,
    SubscriptionResponse,
)
from app.services.subscription import SubscriptionService

logger = logging.getLogger(__name__)

plans_router = APIRouter(prefix="/plans", tags=["Plans"])
router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


@plans_router.get("", response_model=ApiResponse[List[PlanResponse]])
def list_plans_endpoint(
        active_only: bool = False,
        current_user: dict = Depends(get_current_user(STAFF)),
        db: Session = Depends(get_db),
):
    plans = SubscriptionService(db).list_plans(active_only=active_only)
    return ApiResponse(data=[PlanResponse.model_validate(plan) for plan in plans])


@plans_router.post("", response_model=ApiResponse[PlanResponse], status_code=201)
def create_plan_endpoint(
        plan_data: PlanCreate,
        current_user: dict = Depends(get_current_user(STAFF)),
        db: Session = Depends(get_db),
):
    plan = SubscriptionService(db).create_plan(plan_data)
    return ApiResponse(message="Plan created", data=PlanResponse.model_validate(plan))


# Оформление абонемента участнику
@router.post("", response_model=ApiResponse[SubscriptionResponse], status_code=201)
def create_subscription_endpoint(
        subscription_data: SubscriptionCreate,
        current_user: dict = Depends(get_current_user(STAFF)),
        db: Session = Depends(get_db),
):
    subscription = SubscriptionService(db).create_subscription(subscription_data)
    return ApiResponse(message="Subscription created", data=SubscriptionResponse.model_validate(subscription))


@router.get("/user/{user_id}", response_model=ApiResponse[List[SubscriptionResponse]])
def user_subscriptions_endpoint(
        user_id: int,
        current_user: dict = Depends(get_current_user()),
        db: Session = Depends(get_db),
):
    ensure_self_or_staff(current_user, user_id)
    subscriptions = SubscriptionService(db).get_user_subscriptions(user_id)
    return ApiResponse(data=[SubscriptionResponse.model_validate(subscription) for subscription in subscriptions])


@router.post("/{subscription_id}/suspend", response_model=ApiResponse[SubscriptionResponse])
def suspend_subscription_endpoint(
        subscription_id: int,
        current_user: dict = Depends(get_current_user(STAFF)),
        db: Session = Depends(get_db),
):
    subscription = SubscriptionService(db).suspend(subscription_id)
    return ApiResponse(message="Subscription suspended", data=SubscriptionResponse.model_validate(subscription))


@router.post("/{subscription_id}/reactivate", response_model=ApiResponse[SubscriptionResponse])
def reactivate_subscription_endpoint(
        subscription_id: int,
        current_user: dict = Depends(get_current_user(STAFF)),
        db: Session = Depends(get_db),
):
    subscription = SubscriptionService(db).reactivate(subscription_id)
    return ApiResponse(message="Subscription reactivated", data=SubscriptionResponse.model_validate(subscription))


@router.post("/{subscription_id}/cancel", response_model=ApiResponse[SubscriptionResponse])
def cancel_subscription_endpoint(
        subscription_id: int,
        current_user: dict = Depends(get_current_user(STAFF)),
        db: Session = Depends(get_db),
):
    subscription = SubscriptionService(db).cancel(subscription_id)
    return ApiResponse(message="Subscription cancelled", data=SubscriptionResponse.model_validate(subscription))


@router.post("/{subscription_id}/renew", response_model=ApiResponse[SubscriptionResponse])
def renew_subscription_endpoint(
        subscription_id: int,
        renew_data: Optional[SubscriptionRenew] = None,
        current_user: dict = Depends(get_current_user(STAFF)),
        db: Session = Depends(get_db),
):
    start_date = renew_data.start_date if renew_data else None
    subscription = SubscriptionService(db).renew(subscription_id, start_date)
    return ApiResponse(message="Subscription renewed", data=SubscriptionResponse.model_validate(subscription))
