"""User account, profile and bookmark operations."""

import logging
import threading
import uuid
from datetime import datetime
from typing import Literal

from app.models.user import Profile, ProfileUpdateRequest, RegisterRequest, SavedItem, User
from app.services.auth_service import AuthService
from app.services.user_store import UserStore
from app.utils.validators import normalize_email

logger = logging.getLogger("wellness")

SavedKind = Literal["tips", "resources"]


class UserServiceError(ValueError):
    """Domain error with the HTTP status it maps to."""

    status_code = 400


class UserNotFoundError(UserServiceError):
    status_code = 404

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class ProfileNotFoundError(UserServiceError):
    status_code = 404

    def __init__(self, message: str = "Profile not found"):
        super().__init__(message)


class InvalidCredentialsError(UserServiceError):
    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class DuplicateEmailError(UserServiceError):
    pass


class EmailConflictError(DuplicateEmailError):
    status_code = 409

    def __init__(self, message: str = "Email already registered"):
        super().__init__(message)


class IncorrectPasswordError(UserServiceError):
    pass


class IncorrectEmailError(UserServiceError):
    pass


class AlreadySavedError(UserServiceError):
    pass


class SavedItemNotFoundError(UserServiceError):
    status_code = 404


class UserService:
    """Service for user account operations."""

    def __init__(self, store: UserStore, auth_service: AuthService):
        """
        Initialize user service.

        Args:
            store: Document store for users and profiles
            auth_service: Password hashing
        """
        self.store = store
        self.auth_service = auth_service
        # Serializes email uniqueness checks and profile read-modify-write
        # with account deletion
        self._write_lock = threading.RLock()

    def register(self, request: RegisterRequest) -> tuple[User, Profile]:
        """
        Create a user and its profile.

        Raises:
            DuplicateEmailError: If the email is already registered
        """
        return self._create_account(request, DuplicateEmailError("Email is already registered"))

    def create_user(self, request: RegisterRequest) -> tuple[User, Profile]:
        """
        Create a user and its profile, reporting a taken email as a conflict.

        Raises:
            EmailConflictError: If the email is already registered (409)
        """
        return self._create_account(request, EmailConflictError())

    def _create_account(self, request: RegisterRequest, duplicate: DuplicateEmailError) -> tuple[User, Profile]:
        email = normalize_email(request.email)
        password_hash = self.auth_service.hash_password(request.password)

        with self._write_lock:
            if self.store.find_user_by_email(email):
                raise duplicate

            user = self.store.save_user(User(id=str(uuid.uuid4()), email=email, password_hash=password_hash))
            profile = self.store.save_profile(
                Profile(user_id=user.id, first_name=request.first_name, last_name=request.last_name)
            )

        logger.info(f"Registered user {user.id}")
        return user, profile

    def login(self, email: str, password: str) -> User:
        """
        Check credentials.

        Raises:
            InvalidCredentialsError: For an unknown email or wrong password
        """
        user = self.store.find_user_by_email(normalize_email(email))
        if not user or not self.auth_service.verify_password(password, user.password_hash):
            logger.info("Login failed")
            raise InvalidCredentialsError()

        logger.info(f"User {user.id} logged in")
        return user

    def get_user(self, user_id: str) -> User:
        user = self.store.find_user(user_id)
        if not user:
            raise UserNotFoundError()
        return user

    def change_password(self, user_id: str, current_password: str, new_password: str) -> User:
        """
        Replace the password after checking the current one.

        Raises:
            UserNotFoundError: If the user does not exist
            IncorrectPasswordError: If the current password is wrong or unchanged
        """
        user = self.get_user(user_id)

        if not self.auth_service.verify_password(current_password, user.password_hash):
            raise IncorrectPasswordError("Current password is incorrect")

        if current_password == new_password:
            raise IncorrectPasswordError("New password must be different from current password")

        user.password_hash = self.auth_service.hash_password(new_password)
        user.updated_at = datetime.now()
        self.store.save_user(user)

        logger.info(f"Password changed for user {user_id}")
        return user

    def change_email(self, user_id: str, current_email: str, new_email: str) -> User:
        """
        Replace the email after checking the current one.

        Raises:
            UserNotFoundError: If the user does not exist
            IncorrectEmailError: If the current email is wrong
            DuplicateEmailError: If the new email is taken
        """
        current_email = normalize_email(current_email)
        new_email = normalize_email(new_email)

        with self._write_lock:
            user = self.get_user(user_id)
            if user.email != current_email:
                raise IncorrectEmailError("Current email is incorrect")

            existing = self.store.find_user_by_email(new_email)
            if existing and existing.id != user_id:
                raise DuplicateEmailError("Email is already in use")

            user.email = new_email
            user.updated_at = datetime.now()
            self.store.save_user(user)

        logger.info(f"Email changed for user {user_id}")
        return user

    def delete_account(self, user_id: str, password: str) -> None:
        """
        Delete the profile, then the user.

        Raises:
            UserNotFoundError: If the user does not exist
            InvalidCredentialsError: If the password is wrong
        """
        user = self.get_user(user_id)
        if not self.auth_service.verify_password(password, user.password_hash):
            raise InvalidCredentialsError("Invalid password")

        with self._write_lock:
            self.store.delete_profile(user_id)
            self.store.delete_user(user_id)
        logger.info(f"Deleted account {user_id}")

    def get_profile(self, user_id: str) -> Profile:
        profile = self.store.find_profile(user_id)
        if not profile:
            raise UserNotFoundError()
        return profile

    def update_profile(self, user_id: str, request: ProfileUpdateRequest) -> Profile:
        """Apply the fields present in ``request`` to the profile."""
        present = request.model_fields_set

        with self._write_lock:
            profile = self.get_profile(user_id)

            if "first_name" in present and request.first_name is not None:
                profile.first_name = request.first_name
            if "last_name" in present and request.last_name is not None:
                profile.last_name = request.last_name
            if "date_of_birth" in present:
                profile.date_of_birth = request.date_of_birth
            if "gender" in present:
                profile.gender = request.gender or None
            if "conditions" in present and request.conditions is not None:
                profile.conditions = request.conditions

            profile.updated_at = datetime.now()
            self.store.save_profile(profile)
        return profile

    # -- saved tips / resources ----------------------------------------------

    def _saved_profile(self, user_id: str) -> Profile:
        profile = self.store.find_profile(user_id)
        if not profile:
            raise ProfileNotFoundError()
        return profile

    @staticmethod
    def _saved_items(profile: Profile, kind: SavedKind) -> list[SavedItem]:
        return profile.saved_tips if kind == "tips" else profile.saved_resources

    def list_saved(self, user_id: str, kind: SavedKind) -> list[SavedItem]:
        return list(self._saved_items(self._saved_profile(user_id), kind))

    def save_item(self, user_id: str, kind: SavedKind, item_id: str) -> SavedItem:
        """
        Bookmark ``item_id``.

        Raises:
            ProfileNotFoundError: If the user has no profile
            AlreadySavedError: If the item is already bookmarked
        """
        with self._write_lock:
            profile = self._saved_profile(user_id)
            items = self._saved_items(profile, kind)
            if any(item.id == item_id for item in items):
                label = "Tip" if kind == "tips" else "Resource"
                raise AlreadySavedError(f"{label} already saved")

            item = SavedItem(id=item_id)
            items.append(item)
            profile.updated_at = datetime.now()
            self.store.save_profile(profile)
        return item

    def remove_item(self, user_id: str, kind: SavedKind, item_id: str) -> list[SavedItem]:
        """
        Remove a bookmark.

        Raises:
            ProfileNotFoundError: If the user has no profile
            SavedItemNotFoundError: If the item is not bookmarked
        """
        with self._write_lock:
            profile = self._saved_profile(user_id)
            items = self._saved_items(profile, kind)
            remaining = [item for item in items if item.id != item_id]
            if len(remaining) == len(items):
                if kind == "tips":
                    raise SavedItemNotFoundError("Tip not found in saved tips")
                raise SavedItemNotFoundError("Resource not found in saved resources")

            if kind == "tips":
                profile.saved_tips = remaining
            else:
                profile.saved_resources = remaining
            profile.updated_at = datetime.now()
            self.store.save_profile(profile)
        return remaining
