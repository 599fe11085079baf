# storefront/services/user_service.py

import logging
from datetime import datetime, timezone
from typing import List, Optional

import bcrypt
from fastapi import status
from sqlalchemy import func
from sqlmodel import Session, select

from storefront.core.exceptions.app_exception import AppHttpException
from storefront.enums.user_role import UserRole
from storefront.models.user import User
from storefront.schemas.auth import RegisterRequest


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database
        logging.warning("AUTH >>> Stored password hash could not be parsed")
        return False


def find_by_username(session: Session, username: str) -> Optional[User]:
    return session.exec(select(User).where(User.username == username)).first()


def find_by_email(session: Session, email: str) -> Optional[User]:
    return session.exec(select(User).where(User.email == email.lower())).first()


def exists_by_username(session: Session, username: str) -> bool:
    return find_by_username(session, username) is not None


def get_all_users(session: Session) -> List[User]:
    return list(session.exec(select(User).order_by(User.created_at.desc(), User.id.desc())).all())


def count_users(session: Session) -> int:
    return session.exec(select(func.count(User.id))).one()


def register_user(session: Session, data: RegisterRequest, role: UserRole = UserRole.USER) -> User:
    if exists_by_username(session, data.username):
        raise AppHttpException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username is already taken")

    if find_by_email(session, data.email):
        raise AppHttpException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is already registered")

    user = User(
        username=data.username,
        email=data.email.lower(),
        password_hash=hash_password(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        role=role,
    )
    session.add(user)
    session.commit()
    session.refresh(user)

    logging.info(f"AUTH >>> User registered: {user.username} ({user.role.value})")
    return user


def authenticate(session: Session, username: str, password: str) -> User:
    user = find_by_username(session, username)

    if not user or not verify_password(password, user.password_hash):
        logging.info(f"AUTH >>> Failed login for username: {username}")
        raise AppHttpException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")

    if not user.is_active:
        raise AppHttpException(status_code=status.HTTP_401_UNAUTHORIZED, detail="This account has been deactivated")

    user.last_login = datetime.now(timezone.utc)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def toggle_user_active(session: Session, user_id: int, acting_user: User) -> User:
    user = session.get(User, user_id)
    if not user:
        raise AppHttpException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if user.id == acting_user.id:
        raise AppHttpException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot deactivate your own account")

    user.is_active = not user.is_active
    user.updated_at = datetime.now(timezone.utc)
    session.add(user)
    session.commit()
    session.refresh(user)

    logging.info(f"ADMIN >>> User {user.username} is_active={user.is_active} (by {acting_user.username})")
    return user
