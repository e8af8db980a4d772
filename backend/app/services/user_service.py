"""
Accounting Notes Backend: User Service
======================================

What:  The single admin account: lookup, one-time registration, login.
How:   bcrypt hashing in a worker thread (it is CPU-bound and takes tens of
       milliseconds at the default cost). Responses never carry the hash.
Who:   User routes. Login success is turned into the `role` cookie by the
       route; this service only answers "are these credentials valid".
"""

import asyncio
import logging
from typing import Optional

import bcrypt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import ConflictError, DatabaseError, NotFoundError, UnauthorizedError
from app.models.user import User, UserRole
from app.schemas.user import UserResponse

logger = logging.getLogger(__name__)

USER_EXISTS = "Użytkownik już istnieje"
USER_NOT_FOUND = "Użytkownik nie został znaleziony"
WRONG_PASSWORD = "Nieprawidłowe hasło"


def hash_password(password: str, rounds: int) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def check_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


class UserService:
    async def find_admin(self, db: AsyncSession) -> Optional[UserResponse]:
        try:
            result = await db.execute(
                select(User).where(User.role == UserRole.ADMIN.value).limit(1)
            )
            admin = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up admin: %s", str(e))
            raise DatabaseError()

        return UserResponse.model_validate(admin) if admin else None

    async def register_admin(self, db: AsyncSession) -> UserResponse:
        """
        Creates the admin account from settings.admin_username and
        settings.admin_default_password.

        Raises:
            ConflictError: the username is already taken
        """
        username = settings.admin_username
        if await self._find_by_username(db, username) is not None:
            raise ConflictError(message=USER_EXISTS, field="username")

        hashed = await asyncio.to_thread(
            hash_password, settings.admin_default_password, settings.bcrypt_rounds
        )
        admin = User(username=username, hash=hashed, role=UserRole.ADMIN.value)
        db.add(admin)

        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError(message=USER_EXISTS, field="username")
        except SQLAlchemyError as e:
            logger.error("Database error registering admin: %s", str(e))
            raise DatabaseError()

        logger.info("Admin account registered: %s", username)
        return UserResponse.model_validate(admin)

    async def login_admin(self, db: AsyncSession, username: str, password: str) -> UserResponse:
        """
        Raises:
            NotFoundError:     unknown username
            UnauthorizedError: wrong password
        """
        user = await self._find_by_username(db, username)
        if user is None:
            raise NotFoundError(message=USER_NOT_FOUND, resource="user")

        if not await asyncio.to_thread(check_password, password, user.hash):
            logger.warning("Failed admin login for %s", username)
            raise UnauthorizedError(message=WRONG_PASSWORD)

        logger.info("Admin logged in: %s", username)
        return UserResponse.model_validate(user)

    @staticmethod
    async def _find_by_username(db: AsyncSession, username: str) -> Optional[User]:
        try:
            result = await db.execute(select(User).where(User.username == username))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up user: %s", str(e))
            raise DatabaseError()


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
