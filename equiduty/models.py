from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    firebase_uid = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    system_role = Column(String(50), default="user", nullable=False)  # user, system_admin

    # Notification preferences
    notify_leave_updates = Column(Boolean, default=True, nullable=False)
    notify_routine_updates = Column(Boolean, default=True, nullable=False)
    notify_selection_turns = Column(Boolean, default=True, nullable=False)
    notify_inventory_alerts = Column(Boolean, default=True, nullable=False)
    notify_invites = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    memberships = relationship("OrganizationMember", back_populates="user", foreign_keys="OrganizationMember.user_id")

    @property
    def display_name(self) -> str:
        return self.full_name or self.email


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    contact_email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    timezone = Column(String(64), default="Europe/Stockholm", nullable=False)
    subscription_tier = Column(String(50), default="free", nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    owner = relationship("User")
    members = relationship(
        "OrganizationMember", back_populates="organization", cascade="all, delete-orphan"
    )
    stables = relationship("Stable", back_populates="organization", cascade="all, delete-orphan")


class OrganizationMember(Base):
    __tablename__ = "organization_members"
    __table_args__ = (UniqueConstraint("user_id", "organization_id", name="uq_member_user_org"),)

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    roles = Column(JSON, default=list, nullable=False)
    primary_role = Column(String(50), nullable=True)
    status = Column(String(20), default="active", nullable=False)  # pending, active, inactive
    show_in_planning = Column(Boolean, default=True, nullable=False)
    invited_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    joined_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    organization = relationship("Organization", back_populates="members")
    user = relationship("User", back_populates="memberships", foreign_keys=[user_id])


class Invite(Base):
    __tablename__ = "invites"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)
    roles = Column(JSON, default=list, nullable=False)
    primary_role = Column(String(50), nullable=True)
    status = Column(String(20), default="pending", nullable=False)  # pending, accepted, declined, revoked
    invited_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    responded_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    organization = relationship("Organization")
    inviter = relationship("User", foreign_keys=[invited_by])


class Stable(Base):
    __tablename__ = "stables"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    address = Column(String(500), nullable=True)
    facility_number = Column(String(100), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    organization = relationship("Organization", back_populates="stables")


class HorseGroup(Base):
    __tablename__ = "horse_groups"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String(7), nullable=True)  # e.g., #RRGGBB
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    horses = relationship("Horse", back_populates="group")


class Horse(Base):
    __tablename__ = "horses"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    stable_id = Column(Integer, ForeignKey("stables.id"), nullable=True, index=True)
    horse_group_id = Column(Integer, ForeignKey("horse_groups.id"), nullable=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    name = Column(String(255), nullable=False)
    breed = Column(String(100), nullable=True)
    color = Column(String(50), nullable=True)
    gender = Column(String(20), nullable=True)  # mare, stallion, gelding
    date_of_birth = Column(Date, nullable=True)
    ueln = Column(String(15), nullable=True)  # Universal Equine Life Number
    microchip = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(20), default="active", nullable=False)  # active, inactive
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    group = relationship("HorseGroup", back_populates="horses")


class Contact(Base):
    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    contact_type = Column(String(20), default="Personal", nullable=False)  # Personal, Business
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    business_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(50), nullable=True)
    address = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=True)
    stable_id = Column(Integer, ForeignKey("stables.id"), nullable=True, index=True)
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=True)
    entity_type = Column(String(50), nullable=True)
    entity_id = Column(Integer, nullable=True)
    read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class TierDefinition(Base):
    """Stored override of a subscription tier; built-in defaults apply when absent"""

    __tablename__ = "tier_definitions"

    tier = Column(String(50), primary_key=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Integer, default=0, nullable=False)
    limits = Column(JSON, nullable=False)
    modules = Column(JSON, nullable=False)
    enabled = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)
    updated_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


# ============================================================================
# AVAILABILITY
# ============================================================================


class AvailabilitySettings(Base):
    __tablename__ = "availability_settings"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), unique=True, nullable=False)
    require_approval = Column(Boolean, default=True, nullable=False)
    sick_leave_auto_approve = Column(Boolean, default=True, nullable=False)
    max_consecutive_leave_days = Column(Integer, default=30, nullable=False)
    min_advance_notice_days = Column(Integer, default=0, nullable=False)
    monthly_accrual_hours = Column(Float, default=2.5, nullable=False)
    max_carryover_hours = Column(Float, default=40.0, nullable=False)
    carryover_expiry_months = Column(Integer, default=3, nullable=False)
    max_balance_hours = Column(Float, default=200.0, nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class WorkSchedule(Base):
    __tablename__ = "work_schedules"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # [{"dayOfWeek": 0-6 (0 = Sunday), "startTime": "HH:MM", "hours": float, "isWorkDay": bool}]
    weekly_schedule = Column(JSON, nullable=False)
    effective_from = Column(Date, nullable=False)
    effective_until = Column(Date, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    leave_type = Column(String(20), nullable=False)  # vacation, sick, parental, other
    status = Column(String(20), default="pending", nullable=False)
    first_day = Column(Date, nullable=False)
    last_day = Column(Date, nullable=False)
    is_partial_day = Column(Boolean, default=False, nullable=False)
    partial_day_type = Column(String(20), nullable=True)  # morning, afternoon, custom
    partial_day_start_time = Column(String(5), nullable=True)
    partial_day_end_time = Column(String(5), nullable=True)
    note = Column(Text, nullable=True)
    impact_hours = Column(Float, default=0.0, nullable=False)
    reviewed_by = Column(String(255), nullable=True)  # user id, or "system" for auto-approval
    reviewed_at = Column(DateTime, nullable=True)
    review_note = Column(Text, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    requested_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User")


class TimeBalance(Base):
    __tablename__ = "time_balances"
    __table_args__ = (
        UniqueConstraint("user_id", "organization_id", "year", name="uq_balance_user_org_year"),
    )

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    carryover_from_previous_year = Column(Float, default=0.0, nullable=False)
    build_up_hours = Column(Float, default=0.0, nullable=False)
    corrections = Column(Float, default=0.0, nullable=False)
    approved_leave = Column(Float, default=0.0, nullable=False)
    tentative_leave = Column(Float, default=0.0, nullable=False)
    approved_overtime = Column(Float, default=0.0, nullable=False)
    last_accrual_month = Column(String(7), nullable=True)  # YYYY-MM
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class BalanceAdjustment(Base):
    __tablename__ = "balance_adjustments"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    hours = Column(Float, nullable=False)
    reason = Column(Text, nullable=False)
    adjusted_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())


# ============================================================================
# ROUTINES
# ============================================================================


class RoutineTemplate(Base):
    __tablename__ = "routine_templates"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    stable_id = Column(Integer, ForeignKey("stables.id"), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    routine_type = Column(String(20), default="custom", nullable=False)  # morning, midday, evening, custom
    default_start_time = Column(String(5), nullable=False)
    estimated_duration = Column(Integer, default=30, nullable=False)  # minutes
    points_value = Column(Integer, default=1, nullable=False)
    steps = Column(JSON, default=list, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class RoutineInstance(Base):
    __tablename__ = "routine_instances"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    stable_id = Column(Integer, ForeignKey("stables.id"), nullable=False, index=True)
    template_id = Column(Integer, ForeignKey("routine_templates.id"), nullable=False)
    template_name = Column(String(255), nullable=False)
    routine_type = Column(String(20), nullable=False)
    scheduled_date = Column(Date, nullable=False, index=True)
    scheduled_start_time = Column(String(5), nullable=False)
    estimated_duration = Column(Integer, default=30, nullable=False)
    assigned_to = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    assigned_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    assigned_at = Column(DateTime, nullable=True)
    status = Column(String(20), default="scheduled", nullable=False)
    points_value = Column(Integer, default=0, nullable=False)
    points_awarded = Column(Integer, nullable=True)
    steps_completed = Column(Integer, default=0, nullable=False)
    steps_total = Column(Integer, default=0, nullable=False)
    started_at = Column(DateTime, nullable=True)
    started_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    completed_at = Column(DateTime, nullable=True, index=True)
    completed_by = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    cancelled_at = Column(DateTime, nullable=True)
    cancelled_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    assignee = relationship("User", foreign_keys=[assigned_to])
    completer = relationship("User", foreign_keys=[completed_by])


# ============================================================================
# SELECTION PROCESSES
# ============================================================================


class SelectionProcess(Base):
    __tablename__ = "selection_processes"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    stable_id = Column(Integer, ForeignKey("stables.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    algorithm = Column(String(30), default="manual", nullable=False)  # manual, quota_based, points_balance, fair_rotation
    status = Column(String(20), default="draft", nullable=False)  # draft, active, completed, cancelled
    selection_start_date = Column(Date, nullable=False)
    selection_end_date = Column(Date, nullable=False)
    current_turn_index = Column(Integer, default=0, nullable=False)
    quota_per_member = Column(Float, nullable=True)  # quota_based only
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    turns = relationship(
        "SelectionTurn",
        back_populates="process",
        order_by="SelectionTurn.order",
        cascade="all, delete-orphan",
    )


class SelectionTurn(Base):
    __tablename__ = "selection_turns"

    id = Column(Integer, primary_key=True, index=True)
    process_id = Column(Integer, ForeignKey("selection_processes.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    order = Column(Integer, nullable=False)
    status = Column(String(20), default="pending", nullable=False)  # pending, active, completed
    selections_count = Column(Integer, default=0, nullable=False)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    process = relationship("SelectionProcess", back_populates="turns")
    user = relationship("User")


# ============================================================================
# INVENTORY
# ============================================================================


class FeedInventory(Base):
    __tablename__ = "feed_inventory"
    __table_args__ = (UniqueConstraint("stable_id", "feed_type", name="uq_inventory_stable_feed"),)

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    stable_id = Column(Integer, ForeignKey("stables.id"), nullable=False, index=True)
    feed_type = Column(String(255), nullable=False)
    unit = Column(String(20), default="kg", nullable=False)
    current_quantity = Column(Float, default=0.0, nullable=False)
    minimum_stock_level = Column(Float, default=0.0, nullable=False)
    reorder_point = Column(Float, nullable=True)
    reorder_quantity = Column(Float, nullable=True)
    unit_cost = Column(Float, nullable=True)
    currency = Column(String(3), nullable=False)
    supplier = Column(String(255), nullable=True)
    storage_location = Column(String(255), nullable=True)
    expiry_date = Column(Date, nullable=True)
    last_purchase_date = Column(DateTime, nullable=True)
    last_usage_date = Column(DateTime, nullable=True)
    status = Column(String(20), default="in-stock", nullable=False)  # in-stock, low-stock, out-of-stock
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class InventoryTransaction(Base):
    __tablename__ = "inventory_transactions"

    id = Column(Integer, primary_key=True, index=True)
    inventory_id = Column(Integer, ForeignKey("feed_inventory.id"), nullable=False, index=True)
    stable_id = Column(Integer, ForeignKey("stables.id"), nullable=False, index=True)
    transaction_type = Column(String(20), nullable=False)  # restock, usage, adjustment, waste
    quantity = Column(Float, nullable=False)
    previous_quantity = Column(Float, nullable=False)
    new_quantity = Column(Float, nullable=False)
    unit_cost = Column(Float, nullable=True)
    total_cost = Column(Float, nullable=True)
    reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class InventoryAlert(Base):
    __tablename__ = "inventory_alerts"

    id = Column(Integer, primary_key=True, index=True)
    inventory_id = Column(Integer, ForeignKey("feed_inventory.id"), nullable=False, index=True)
    stable_id = Column(Integer, ForeignKey("stables.id"), nullable=False, index=True)
    alert_type = Column(String(20), nullable=False)  # low-stock, out-of-stock, expiring
    feed_type = Column(String(255), nullable=False)
    current_quantity = Column(Float, nullable=False)
    threshold = Column(Float, nullable=True)
    is_acknowledged = Column(Boolean, default=False, nullable=False)
    acknowledged_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    acknowledged_at = Column(DateTime, nullable=True)
    is_resolved = Column(Boolean, default=False, nullable=False)
    resolved_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
