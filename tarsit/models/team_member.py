# ============================================================================
# FILE: tarsit/models/team_member.py
# Scoped permissions a business owner grants to other users
# ============================================================================
from sqlalchemy import Column, Boolean, DateTime, ForeignKey, Uuid, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum
from tarsit.models.base import Base


class TeamRole(str, enum.Enum):
    """Roles a team member can hold within a business."""
    MANAGER = "MANAGER"  # Every permission, short of ownership
    STAFF = "STAFF"      # Only the flags explicitly granted


class TeamMember(Base):
    __tablename__ = "team_members"
    __table_args__ = (
        UniqueConstraint("business_id", "user_id", name="uq_team_members_business_user"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(
        Uuid(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(SQLEnum(TeamRole), default=TeamRole.STAFF, nullable=False)
    active = Column(Boolean, default=True, nullable=False)

    # Permission flags
    can_manage_chat = Column(Boolean, default=False, nullable=False)
    can_manage_hours = Column(Boolean, default=False, nullable=False)
    can_manage_description = Column(Boolean, default=False, nullable=False)
    can_manage_photos = Column(Boolean, default=False, nullable=False)
    can_manage_services = Column(Boolean, default=False, nullable=False)
    can_manage_appointments = Column(Boolean, default=False, nullable=False)
    can_view_analytics = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    business = relationship("Business", back_populates="team_members")
    user = relationship("User")

    def __repr__(self):
        return f"<TeamMember(business_id={self.business_id}, user_id={self.user_id}, role={self.role})>"
