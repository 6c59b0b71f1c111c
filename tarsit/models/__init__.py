# tarsit/models/__init__.py
from .base import Base
from .user import User
from .business import Business, BusinessHours
from .service import Service
from .team_member import TeamMember, TeamRole
from .appointment import Appointment, AppointmentStatus, TERMINAL_STATUSES, FREED_STATUSES

__all__ = [
    "Base",
    "User",
    "Business",
    "BusinessHours",
    "Service",
    "TeamMember",
    "TeamRole",
    "Appointment",
    "AppointmentStatus",
    "TERMINAL_STATUSES",
    "FREED_STATUSES",
]
