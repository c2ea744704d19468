import logging

from sqlalchemy.orm import Session

from materials_api.auth.passwords import hash_password, verify_password
from materials_api.core.errors import bad_request, unauthorized
from materials_api.database import utcnow
from materials_api.models.user import User, UserRole, UserStatus
from materials_api.repositories import user_repository
from materials_api.schemas.user_schema import LoginRequest, RegisterRequest, UpdateDetailsRequest
from materials_api.validation import UNSET, normalize_email, validate_user_fields

logger = logging.getLogger(__name__)


def register_user(db: Session, data: RegisterRequest) -> User:
    result = validate_user_fields(
        name=data.name,
        email=data.email,
        password=data.password,
        role=data.role,
    )
    if data.role == UserRole.admin.value:
        result.add('Cannot register as admin')
    result.raise_for_errors()

    email = normalize_email(data.email)
    if user_repository.get_user_by_email(db, email) is not None:
        raise bad_request('Email already in use')

    user = user_repository.create_user(
        db,
        name=data.name.strip(),
        email=email,
        hashed_password=hash_password(data.password),
        role=UserRole(data.role),
    )
    logger.info('Registered user %s with role %s', user.id, user.role.value)
    return user


def authenticate(db: Session, data: LoginRequest) -> User:
    if not data.email or not data.password:
        raise bad_request('Please provide an email and password')

    user = user_repository.get_user_by_email(db, data.email)
    if user is None or not verify_password(data.password, user.hashed_password):
        raise unauthorized('Invalid credentials')
    if user.status != UserStatus.active:
        raise unauthorized('Account is not active')

    user = user_repository.update_user(db, user, {'last_login': utcnow()})
    logger.info('User %s logged in', user.id)
    return user


def update_user_details(db: Session, user: User, data: UpdateDetailsRequest) -> User:
    changes = data.model_dump(exclude_unset=True)
    validate_user_fields(
        name=changes.get('name', UNSET),
        email=changes.get('email', UNSET),
        partial=True,
    ).raise_for_errors()

    if 'name' in changes:
        changes['name'] = changes['name'].strip()
    if 'email' in changes:
        changes['email'] = normalize_email(changes['email'])
        existing = user_repository.get_user_by_email(db, changes['email'])
        if existing is not None and existing.id != user.id:
            raise bad_request('Email already in use')

    if not changes:
        return user
    return user_repository.update_user(db, user, changes)
