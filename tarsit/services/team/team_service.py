# ============================================================================
# tarsit/services/team/team_service.py
# Permission lookups over team memberships
# ============================================================================
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
import logging

from tarsit.models.business import Business
from tarsit.models.team_member import TeamMember, TeamRole

logger = logging.getLogger(__name__)

# Permission names as exposed to clients -> TeamMember flag columns
PERMISSION_FLAGS = {
    "canManageChat": "can_manage_chat",
    "canManageHours": "can_manage_hours",
    "canManageDescription": "can_manage_description",
    "canManagePhotos": "can_manage_photos",
    "canManageServices": "can_manage_services",
    "canManageAppointments": "can_manage_appointments",
    "canViewAnalytics": "can_view_analytics",
}


class TeamService:
    """Answers "may this user do X for this business" questions"""

    @staticmethod
    def get_membership(
            db: Session,
            user_id: UUID,
            business_id: UUID
    ) -> Optional[TeamMember]:
        """Get the user's team-membership row for a business, if any."""
        return db.query(TeamMember).filter(
            TeamMember.business_id == business_id,
            TeamMember.user_id == user_id
        ).first()

    @staticmethod
    def has_permission(
            db: Session,
            user_id: UUID,
            business_id: UUID,
            permission: str
    ) -> bool:
        """
        Check a single permission.

        The business owner holds every permission. Other users need an
        active membership; managers hold every permission, staff only the
        flags granted to them.
        """
        flag = PERMISSION_FLAGS.get(permission)
        if flag is None:
            raise ValueError(f"Unknown permission: {permission}")

        business = db.query(Business).filter(Business.id == business_id).first()
        if not business:
            return False

        if business.owner_id == user_id:
            return True

        member = TeamService.get_membership(db, user_id, business_id)
        if not member or not member.active:
            return False

        if member.role == TeamRole.MANAGER:
            return True

        return bool(getattr(member, flag, False))

    @staticmethod
    def can_view_business(
            db: Session,
            user_id: UUID,
            business_id: UUID
    ) -> bool:
        """Read access: the owner or any active team member."""
        business = db.query(Business).filter(Business.id == business_id).first()
        if not business:
            return False

        if business.owner_id == user_id:
            return True

        member = TeamService.get_membership(db, user_id, business_id)
        return bool(member and member.active)
