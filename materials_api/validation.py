"""Field rules for users and materials.

Each ``validate_*`` function returns a :class:`ValidationResult` listing every
violation rather than stopping at the first one. Services call these before
touching the database and turn a failed result into a 400 response.
"""

import re
from dataclasses import dataclass, field

from materials_api.core.errors import ErrorResponse, bad_request
from materials_api.models.user import UserRole, UserStatus

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
EMAIL_MIN_LENGTH = 6
EMAIL_MAX_LENGTH = 100
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 255
TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$')

# Marks a field the caller did not supply, as opposed to an explicit None.
UNSET = object()


@dataclass
class ValidationResult:
    errors: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def add(self, message: str) -> None:
        self.errors.append(message)

    def as_error(self) -> ErrorResponse:
        return bad_request(', '.join(self.errors))

    def raise_for_errors(self) -> None:
        if self.errors:
            raise self.as_error()


def normalize_email(value: str) -> str:
    return value.strip().lower()


def _check_length(result: ValidationResult, value: str, minimum: int, maximum: int, message: str) -> None:
    if not minimum <= len(value) <= maximum:
        result.add(message)


def _is_blank(value) -> bool:
    return value is None or not value.strip()


def validate_user_fields(
    name=UNSET,
    email=UNSET,
    password=UNSET,
    role=UNSET,
    status=UNSET,
    *,
    partial: bool = False,
) -> ValidationResult:
    """Check user fields. Fields left as ``UNSET`` are only required when not ``partial``."""
    result = ValidationResult()

    if name is UNSET or _is_blank(name):
        if not partial or name is not UNSET:
            result.add('Name is required')
    else:
        _check_length(
            result,
            name.strip(),
            NAME_MIN_LENGTH,
            NAME_MAX_LENGTH,
            f'Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters',
        )

    if email is UNSET or _is_blank(email):
        if not partial or email is not UNSET:
            result.add('Email is required')
    else:
        normalized = normalize_email(email)
        if not EMAIL_PATTERN.match(normalized):
            result.add('Please provide a valid email')
        _check_length(
            result,
            normalized,
            EMAIL_MIN_LENGTH,
            EMAIL_MAX_LENGTH,
            f'Email must be between {EMAIL_MIN_LENGTH} and {EMAIL_MAX_LENGTH} characters',
        )

    if password is UNSET or password is None or password == '':
        if not partial or password is not UNSET:
            result.add('Password is required')
    elif not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        result.add(f'Password must be at least {PASSWORD_MIN_LENGTH} characters long')

    if role is not UNSET and role not in {member.value for member in UserRole}:
        result.add('Invalid user role')

    if status is not UNSET and status not in {member.value for member in UserStatus}:
        result.add('Invalid status')

    return result


def validate_material_fields(
    title=UNSET,
    description=UNSET,
    *,
    partial: bool = False,
) -> ValidationResult:
    result = ValidationResult()

    if title is UNSET or _is_blank(title):
        if not partial or title is not UNSET:
            result.add('Please add a title')
    elif len(title.strip()) > TITLE_MAX_LENGTH:
        result.add(f'Title can not be more than {TITLE_MAX_LENGTH} characters')

    if isinstance(description, str) and len(description) > DESCRIPTION_MAX_LENGTH:
        result.add(f'Description can not be more than {DESCRIPTION_MAX_LENGTH} characters')

    return result
