from sqlalchemy.orm import Session

from materials_api.database import commit_or_rollback
from materials_api.models.user import User
from materials_api.validation import normalize_email


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def create_user(db: Session, **fields) -> User:
    user = User(**fields)
    db.add(user)
    commit_or_rollback(db)
    db.refresh(user)
    return user


def update_user(db: Session, user: User, changes: dict) -> User:
    for key, value in changes.items():
        setattr(user, key, value)
    commit_or_rollback(db)
    db.refresh(user)
    return user
