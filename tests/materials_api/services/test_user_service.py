import pytest

from materials_api.auth.passwords import verify_password
from materials_api.core.errors import ErrorResponse
from materials_api.models.user import UserRole, UserStatus
from materials_api.schemas.user_schema import LoginRequest, RegisterRequest, UpdateDetailsRequest
from materials_api.services import user_service


def _register(db, **overrides):
    fields = {'name': 'Alan Turing', 'email': 'Alan@Bletchley.org', 'password': 'enigma42'}
    fields.update(overrides)
    return user_service.register_user(db, RegisterRequest(**fields))


def test_register_stores_lowercase_email_and_hashed_password(db_session) -> None:
    user = _register(db_session)

    assert user.email == 'alan@bletchley.org'
    assert user.hashed_password != 'enigma42'
    assert verify_password('enigma42', user.hashed_password)
    assert user.role == UserRole.student
    assert user.status == UserStatus.active
    assert user.is_email_verified is False


def test_register_rejects_case_insensitive_duplicate(db_session) -> None:
    _register(db_session, email='A@x.com')

    with pytest.raises(ErrorResponse) as exception_info:
        _register(db_session, email='a@x.com')

    assert exception_info.value.status_code == 400
    assert exception_info.value.message == 'Email already in use'


def test_register_accepts_teacher_role(db_session) -> None:
    user = _register(db_session, role=' Teacher ')

    assert user.role == UserRole.teacher


def test_authenticate_returns_user_and_sets_last_login(db_session) -> None:
    _register(db_session)

    user = user_service.authenticate(db_session, LoginRequest(email='ALAN@bletchley.org', password='enigma42'))

    assert user.email == 'alan@bletchley.org'
    assert user.last_login is not None


def test_authenticate_rejects_unknown_email(db_session) -> None:
    with pytest.raises(ErrorResponse) as exception_info:
        user_service.authenticate(db_session, LoginRequest(email='nobody@example.edu', password='whatever'))

    assert exception_info.value.status_code == 401


def test_update_user_details_without_changes_is_noop(db_session) -> None:
    user = _register(db_session)

    updated = user_service.update_user_details(db_session, user, UpdateDetailsRequest())

    assert updated is user
    assert updated.name == 'Alan Turing'


def test_update_user_details_validates_name(db_session) -> None:
    user = _register(db_session)

    with pytest.raises(ErrorResponse) as exception_info:
        user_service.update_user_details(db_session, user, UpdateDetailsRequest(name='A'))

    assert exception_info.value.message == 'Name must be between 2 and 100 characters'
