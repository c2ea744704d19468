"""User model definitions."""

from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy import Enum as SAEnum

from materials_api.database import Base, utcnow


class UserRole(str, Enum):
    student = "student"
    teacher = "teacher"
    admin = "admin"


class UserStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    suspended = "suspended"


def _enum_values(enum_class) -> list[str]:
    return [member.value for member in enum_class]


class User(Base):
    """Represents an application user.

    ``email`` is always stored lowercase and ``hashed_password`` only ever
    holds a bcrypt hash; both are enforced in ``user_service``.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(
        SAEnum(UserRole, name="user_role", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=UserRole.student,
    )
    profile_picture = Column(String(255), nullable=True)
    is_email_verified = Column(Boolean, nullable=False, default=False)
    last_login = Column(DateTime, nullable=True)
    reset_password_token = Column(String(255), nullable=True)
    reset_password_expire = Column(DateTime, nullable=True)
    status = Column(
        SAEnum(UserStatus, name="user_status", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=UserStatus.active,
    )
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
