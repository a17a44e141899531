from .plan import PlanTier, Plan
from .user import UserRole, AccountStatus, STAFF_ROLES, User
from .subscription import SubscriptionStatus, Subscription
from .instructor import InstructorStatus, Instructor
from .gym_class import Difficulty, ClassStatus, GymClass, ClassInstructor
from .schedule_slot import DAY_NAMES, SlotStatus, ScheduleSlot
from .booking import BookingStatus, TERMINAL_BOOKING_STATUSES, Booking
from .check_in import CheckInMethod, CheckIn
