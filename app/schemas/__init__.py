from .common import ApiResponse, ErrorBody, ErrorResponse
from .user import UserBrief, UserResponse
from .schedule import (
    ScheduleSlotCreate, ScheduleSlotUpdate, ScheduleSlotResponse, ScheduleSlotWithEnrollment,
    SlotCancelRequest, SlotCancelResult, RosterEntry, ClassSlotInline,
)
from .booking import (
    BookingCreate, ClassBookingRequest, BookingCancelRequest, BookingResponse, BookingDetail,
    BookingResult, BookingCancelResult,
)
from .check_in import (
    Entitlement, QRMintResponse, QRVerifyRequest, QRVerification, CheckInCreate, CheckInResponse,
    CheckInResult, CheckInStatistics,
)
from .gym_class import (
    InstructorCreate, InstructorUpdate, InstructorResponse, GymClassCreate, GymClassUpdate,
    GymClassResponse, GymClassDetail,
)
from .subscription import PlanCreate, PlanResponse, SubscriptionCreate, SubscriptionRenew, SubscriptionResponse
