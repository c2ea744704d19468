import os

os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret')
os.environ.setdefault('LOG_LEVEL', 'WARNING')

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from materials_api.auth import jwt_handler  # noqa: E402
from materials_api.auth.passwords import hash_password  # noqa: E402
from materials_api.core import config  # noqa: E402
from materials_api.database import Base, get_db  # noqa: E402
from materials_api.main import app  # noqa: E402
from materials_api.models.material import Material  # noqa: E402
from materials_api.models.user import User, UserRole  # noqa: E402


@pytest.fixture
def session_factory():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine, tables=[User.__table__, Material.__table__])
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    try:
        yield testing_session_local
    finally:
        Base.metadata.drop_all(bind=engine, tables=[Material.__table__, User.__table__])
        engine.dispose()


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def upload_dir(tmp_path, monkeypatch: pytest.MonkeyPatch):
    path = tmp_path / 'uploads'
    monkeypatch.setattr(config, 'FILE_UPLOAD_PATH', str(path))
    return path


@pytest.fixture
def client(session_factory, upload_dir):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def make_user(session_factory):
    counter = {'value': 0}

    def _make_user(role: UserRole = UserRole.teacher, email: str | None = None, password: str = 'secret123', **fields):
        counter['value'] += 1
        db = session_factory()
        try:
            user = User(
                name=fields.pop('name', f'User {counter["value"]}'),
                email=email or f'user{counter["value"]}@example.edu',
                hashed_password=hash_password(password),
                role=role,
                **fields,
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            db.expunge(user)
            return user
        finally:
            db.close()

    return _make_user


@pytest.fixture
def make_material(session_factory):
    def _make_material(owner: User, title: str = 'Intro to Algebra', **fields):
        db = session_factory()
        try:
            material = Material(user_id=owner.id, title=title, **fields)
            db.add(material)
            db.commit()
            db.refresh(material)
            db.expunge(material)
            return material
        finally:
            db.close()

    return _make_material


@pytest.fixture
def auth_header():
    def _auth_header(user: User) -> dict:
        return {'Authorization': f'Bearer {jwt_handler.create_access_token(user)}'}

    return _auth_header
