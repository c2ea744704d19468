import jwt
import pytest
from fastapi.security import HTTPAuthorizationCredentials

from materials_api.auth import jwt_handler
from materials_api.auth.dependencies import AuthContext, authorize, protect
from materials_api.auth.passwords import hash_password, verify_password
from materials_api.core import config
from materials_api.core.errors import ErrorResponse
from materials_api.models.user import User, UserRole, UserStatus


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme='Bearer', credentials=token)


@pytest.fixture
def student(db_session) -> User:
    user = User(name='Sam Student', email='sam@example.edu', hashed_password=hash_password('secret1'), role=UserRole.student)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def test_password_hash_never_equals_plaintext() -> None:
    hashed = hash_password('secret1')

    assert hashed != 'secret1'
    assert verify_password('secret1', hashed)
    assert not verify_password('secret2', hashed)
    assert not verify_password('secret1', None)


def test_access_token_carries_identity_and_role(student) -> None:
    payload = jwt_handler.decode_access_token(jwt_handler.create_access_token(student))

    assert payload['id'] == student.id
    assert payload['sub'] == str(student.id)
    assert payload['email'] == 'sam@example.edu'
    assert payload['role'] == 'student'
    assert payload['exp'] > payload['iat']


def test_protect_loads_user_into_context(db_session, student) -> None:
    context = protect(_credentials(jwt_handler.create_access_token(student)), db_session)

    assert context.user.id == student.id
    assert context.role == UserRole.student
    assert context.owns(student.id)
    assert not context.owns(student.id + 1)
    assert not context.is_admin


def test_protect_without_credentials_is_unauthorized(db_session) -> None:
    with pytest.raises(ErrorResponse) as exception_info:
        protect(None, db_session)

    assert exception_info.value.status_code == 401
    assert exception_info.value.message == 'Not authorized to access this route'


def test_protect_rejects_expired_token(db_session, student) -> None:
    token = jwt_handler.create_access_token(student, expires_minutes=-1)

    with pytest.raises(ErrorResponse) as exception_info:
        protect(_credentials(token), db_session)

    assert exception_info.value.status_code == 401


def test_protect_rejects_token_signed_with_other_secret(db_session, student) -> None:
    token = jwt.encode({'id': student.id}, 'some-other-secret', algorithm=config.JWT_ALGORITHM)

    with pytest.raises(ErrorResponse) as exception_info:
        protect(_credentials(token), db_session)

    assert exception_info.value.status_code == 401


def test_authorize_rejects_role_outside_allowed_set(student) -> None:
    check_role = authorize(UserRole.teacher, UserRole.admin)

    with pytest.raises(ErrorResponse) as exception_info:
        check_role(AuthContext(user=student))

    assert exception_info.value.status_code == 403
    assert exception_info.value.message == 'User role student is not authorized to access this route'


def test_authorize_passes_context_through_for_allowed_role(student) -> None:
    context = AuthContext(user=student)

    assert authorize(UserRole.student)(context) is context


@pytest.mark.parametrize('status', [UserStatus.inactive, UserStatus.suspended])
def test_protect_rejects_account_that_is_not_active(db_session, student, status: UserStatus) -> None:
    token = jwt_handler.create_access_token(student)
    student.status = status
    db_session.commit()

    with pytest.raises(ErrorResponse) as exception_info:
        protect(_credentials(token), db_session)

    assert exception_info.value.status_code == 401
    assert exception_info.value.message == 'Account is not active'
