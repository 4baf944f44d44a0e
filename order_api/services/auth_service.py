import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from order_api.auth import jwt_handler
from order_api.auth.passwords import hash_password, verify_password
from order_api.core.errors import ConflictError, DatabaseUnavailableError, UnauthorizedError
from order_api.models.user import User

logger = logging.getLogger(__name__)


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()


def public_user(user: User) -> dict:
    return {'email': user.email, 'role': user.role}


def register_user(db: Session, email: str, password: str, role: str) -> dict:
    """Create an account and return its public fields.

    Raises ConflictError when the email is already registered.
    """
    try:
        if find_user_by_email(db, email) is not None:
            raise ConflictError('Email already exists')

        user = User(email=email, hashed_password=hash_password(password), role=role)
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError as exc:
        # Lost a race against a concurrent registration for the same email.
        db.rollback()
        raise ConflictError('Email already exists') from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise DatabaseUnavailableError() from exc

    logger.info('Registered %s as %s', user.email, user.role)
    return public_user(user)


def authenticate(db: Session, email: str, password: str) -> User | None:
    user = find_user_by_email(db, email)
    if user is None or not verify_password(password, user.hashed_password):
        return None
    return user


def issue_token(user: User) -> str:
    return jwt_handler.create_access_token(
        subject=str(user.id),
        claims={'email': user.email, 'role': user.role},
    )


def login(db: Session, email: str, password: str) -> dict:
    try:
        user = authenticate(db, email, password)
    except SQLAlchemyError as exc:
        raise DatabaseUnavailableError() from exc

    if user is None:
        logger.warning('Failed login for %s', email)
        raise UnauthorizedError('Invalid credentials')

    return {'token': issue_token(user), 'user': public_user(user)}
