from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint

from playgroup.db.session import Base, utcnow


class User(Base):
    """Login account with a role. Parent accounts link to one student."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), nullable=False, unique=True)
    email = Column(String(255), nullable=False, unique=True)
    full_name = Column(String(255), nullable=False)
    password_hash = Column(Text, nullable=False)
    # parent | teacher | officeadmin | superadmin
    role = Column(String(20), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    # Set for parent accounts created from a student record
    student_id = Column(Integer, ForeignKey("students.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class RolePermission(Base):
    """Module permission row for a role (view/create/edit/delete flags)."""

    __tablename__ = "role_permissions"
    __table_args__ = (
        UniqueConstraint("role", "module", name="uq_role_permission_role_module"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    role = Column(String(20), nullable=False, index=True)
    module = Column(String(50), nullable=False)
    can_view = Column(Boolean, nullable=False, default=False)
    can_create = Column(Boolean, nullable=False, default=False)
    can_edit = Column(Boolean, nullable=False, default=False)
    can_delete = Column(Boolean, nullable=False, default=False)
