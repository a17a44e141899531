# app/errors/subscription_errors.py
from app.errors.gym_errors import NotFound, Invalid


class SubscriptionNotFound(NotFound):
    """Raised when a subscription is not found."""
    pass


class PlanNotFound(NotFound):
    """Raised when a plan is not found."""
    pass


class SubscriptionStateError(Invalid):
    """Raised when a transition is not allowed from the subscription's current status."""
    pass
