from sqlalchemy.orm import Session
from sqlalchemy import or_, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from typing import Optional, List
import logging

from stockledger.models.user import User
from stockledger.schemas.user import UserCreate, UserUpdate
from stockledger.services.auth_service import hash_password
from stockledger.services.errors import DuplicateUserError, UserNotFoundError

logger = logging.getLogger(__name__)


class UserService:
    """CRUD for application users. Deleting a user only marks it as deleted."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> List[User]:
        return (
            self.db.query(User)
            .filter(User.deleted_at.is_(None))
            .order_by(User.created_at.desc(), User.id.desc())
            .all()
        )

    def get_by_id(self, user_id: int) -> Optional[User]:
        return (
            self.db.query(User)
            .filter(User.id == user_id, User.deleted_at.is_(None))
            .first()
        )

    def create(self, user_data: UserCreate) -> User:
        """
        Create a user with a hashed password.

        Raises:
            DuplicateUserError: If the username or email is taken
        """
        self._ensure_available(user_data.username, user_data.email)
        data = user_data.model_dump(exclude={"password"})
        user = User(password_hash=hash_password(user_data.password), **data)
        self.db.add(user)
        self._commit(f"creating user '{user_data.username}'")
        self.db.refresh(user)
        logger.info(f"User '{user.username}' created with role {user.role.value}")
        return user

    def update(self, user_id: int, user_data: UserUpdate) -> User:
        """
        Update only the supplied fields of a user.

        Raises:
            UserNotFoundError: If the user doesn't exist
            DuplicateUserError: If the new username or email is taken
        """
        user = self.get_by_id(user_id)
        if not user:
            raise UserNotFoundError(f"User with ID {user_id} not found")

        update_data = {
            field: value
            for field, value in user_data.model_dump(exclude_unset=True).items()
            if value is not None
        }
        self._ensure_available(
            update_data.get("username"), update_data.get("email"), exclude_id=user_id
        )

        password = update_data.pop("password", None)
        if password is not None:
            user.password_hash = hash_password(password)
        for field, value in update_data.items():
            setattr(user, field, value)

        self._commit(f"updating user #{user_id}")
        self.db.refresh(user)
        return user

    def delete(self, user_id: int) -> None:
        """
        Soft-delete a user.

        Raises:
            UserNotFoundError: If the user doesn't exist
        """
        user = self.get_by_id(user_id)
        if not user:
            raise UserNotFoundError(f"User with ID {user_id} not found")
        user.deleted_at = func.now()
        self._commit(f"deleting user #{user_id}")
        logger.info(f"User #{user_id} deleted")

    def _ensure_available(self, username, email, exclude_id: int = None) -> None:
        conditions = []
        if username:
            conditions.append(User.username == username)
        if email:
            conditions.append(User.email == email)
        if not conditions:
            return
        query = self.db.query(User.id).filter(or_(*conditions))
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        if query.first():
            raise DuplicateUserError("Username or email is already in use")

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity error {action}: {e}")
            raise DuplicateUserError("Username or email is already in use") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error {action}: {e}")
            raise
