"""YAML document store for users and profiles."""

import logging
import re
from datetime import date
from pathlib import Path
from typing import Any, Optional

from app.models.user import Profile, User
from app.services.encryption_service import EncryptionService
from app.services.yaml_service import YAMLService
from app.utils.file_utils import FileUtils

logger = logging.getLogger("wellness")

_ID_PATTERN = re.compile(r"^[A-Za-z0-9-]+$")


class UserStore:
    """
    Persists users and profiles as one YAML document each.

    Layout::

        <data_dir>/users/<user id>.yaml
        <data_dir>/profiles/<user id>.yaml

    Profile fields holding personal data are encrypted on save and decrypted
    on load; the rest of the application only ever sees plaintext models.
    """

    def __init__(self, data_dir: Path, encryption: EncryptionService):
        """
        Initialize user store.

        Args:
            data_dir: Base directory for documents
            encryption: Field encryption used for profile documents
        """
        self.data_dir = data_dir
        self.encryption = encryption
        self.users_dir = data_dir / "users"
        self.profiles_dir = data_dir / "profiles"

        FileUtils.ensure_directory(self.users_dir)
        FileUtils.ensure_directory(self.profiles_dir)

    @staticmethod
    def _document_path(directory: Path, doc_id: str) -> Path:
        if not doc_id or not _ID_PATTERN.match(doc_id):
            raise ValueError(f"Invalid document id: {doc_id}")
        return directory / f"{doc_id}.yaml"

    # -- users ---------------------------------------------------------------

    def find_user(self, user_id: str) -> Optional[User]:
        """Load a user by id, or None if it does not exist."""
        try:
            path = self._document_path(self.users_dir, user_id)
        except ValueError:
            return None
        if not path.exists():
            return None
        return User(**YAMLService.load_yaml(path))

    def find_user_by_email(self, email: str) -> Optional[User]:
        """Scan users for an exact email match."""
        for path in sorted(self.users_dir.glob("*.yaml")):
            data = YAMLService.load_yaml(path)
            if data.get("email") == email:
                return User(**data)
        return None

    def save_user(self, user: User) -> User:
        path = self._document_path(self.users_dir, user.id)
        YAMLService.save_yaml(path, user.model_dump())
        logger.debug(f"Saved user {user.id}")
        return user

    def delete_user(self, user_id: str) -> bool:
        path = self._document_path(self.users_dir, user_id)
        if not path.exists():
            return False
        path.unlink()
        logger.info(f"Deleted user {user_id}")
        return True

    # -- profiles ------------------------------------------------------------

    def find_profile(self, user_id: str) -> Optional[Profile]:
        """Load and decrypt the profile of ``user_id``."""
        try:
            path = self._document_path(self.profiles_dir, user_id)
        except ValueError:
            return None
        if not path.exists():
            return None
        return self._decrypt_profile(YAMLService.load_yaml(path))

    def save_profile(self, profile: Profile) -> Profile:
        """Encrypt and persist ``profile``."""
        path = self._document_path(self.profiles_dir, profile.user_id)
        YAMLService.save_yaml(path, self._encrypt_profile(profile))
        logger.debug(f"Saved profile for user {profile.user_id}")
        return profile

    def delete_profile(self, user_id: str) -> bool:
        path = self._document_path(self.profiles_dir, user_id)
        if not path.exists():
            return False
        path.unlink()
        logger.info(f"Deleted profile for user {user_id}")
        return True

    def _encrypt_profile(self, profile: Profile) -> dict[str, Any]:
        data = profile.model_dump()
        enc = self.encryption
        data["first_name"] = enc.encrypt_optional(profile.first_name)
        data["last_name"] = enc.encrypt_optional(profile.last_name)
        data["date_of_birth"] = enc.encrypt_optional(
            profile.date_of_birth.isoformat() if profile.date_of_birth else None
        )
        data["gender"] = enc.encrypt_optional(profile.gender)
        data["conditions"] = [
            {"id": c.id, "name": enc.encrypt_optional(c.name)} for c in profile.conditions
        ]
        return data

    def _decrypt_profile(self, data: dict[str, Any]) -> Profile:
        enc = self.encryption
        data = dict(data)
        data["first_name"] = enc.decrypt_optional(data.get("first_name")) or ""
        data["last_name"] = enc.decrypt_optional(data.get("last_name")) or ""

        dob = data.get("date_of_birth")
        if isinstance(dob, str):
            try:
                data["date_of_birth"] = date.fromisoformat(enc.decrypt(dob))
            except ValueError as e:
                logger.error(f"Unreadable date of birth in profile {data.get('user_id')}: {e}")
                data["date_of_birth"] = None

        data["gender"] = enc.decrypt_optional(data.get("gender"))
        data["conditions"] = [
            {"id": c["id"], "name": enc.decrypt_optional(c.get("name")) or ""}
            for c in data.get("conditions") or []
        ]
        return Profile(**data)
