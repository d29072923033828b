"""
User Store Service

Persists the local copy of Clerk users, keyed by Clerk user ID.
Provides thread-safe CRUD operations on a JSON file.
"""

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..errors import UserStoreError

logger = logging.getLogger(__name__)


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class UserStore:
    """
    Persistent storage for users mirrored from Clerk.

    The store maintains a JSON file that maps Clerk user IDs to user records.
    Every record carries an internal ``_id`` which is written back onto the
    Clerk user as public metadata after creation.

    Thread-safe using a process-local lock around each read-modify-write.

    Example usage:
        store = UserStore("/data/users.json")

        user = store.create_user({
            "clerkId": "user_2kerzjYiQFhFNCQW0pGVYmVoC48",
            "email": "jane@example.com",
            "username": "jane",
            "firstName": "Jane",
            "lastName": "Example",
            "photo": "https://img.clerk.com/...",
        })
        # Returns: {"_id": "...", "clerkId": "user_...", ..., "createdAt": "...", "updatedAt": "..."}

        store.update_user("user_2kerzjYiQFhFNCQW0pGVYmVoC48", {"firstName": "Janet"})
        store.delete_user("user_2kerzjYiQFhFNCQW0pGVYmVoC48")
    """

    def __init__(self, data_file: str):
        """
        Initialize UserStore with path to JSON data file.

        Args:
            data_file: Path to JSON file for storing users
        """
        self.data_file = Path(data_file)
        self._lock = threading.Lock()

        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            if not self.data_file.exists():
                self._write_data({})
        except OSError as e:
            raise UserStoreError(f"Cannot initialize user store at {self.data_file}: {e}") from e

    def _read_data(self) -> Dict[str, Dict[str, Any]]:
        """
        Read user data from JSON file.

        Returns:
            Dictionary mapping Clerk IDs to user records

        Raises:
            UserStoreError: If the file cannot be read or is not valid JSON
        """
        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            raise UserStoreError(f"Cannot read user store {self.data_file}: {e}") from e

        if not isinstance(data, dict):
            raise UserStoreError(f"User store {self.data_file} does not contain a JSON object")
        return data

    def _write_data(self, data: Dict[str, Dict[str, Any]]) -> None:
        """
        Write user data to JSON file atomically.

        Writes to a temp file, then renames it over the store file.

        Args:
            data: Dictionary mapping Clerk IDs to user records
        """
        temp_file = self.data_file.with_suffix(".tmp")

        try:
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_file.replace(self.data_file)
        except OSError as e:
            raise UserStoreError(f"Cannot write user store {self.data_file}: {e}") from e

    def create_user(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Create a user from a create record.

        Redelivered user.created webhooks must not create duplicates, so when a
        user with the same ``clerkId`` exists it is returned unchanged.

        Args:
            record: Create record with clerkId, email, username, firstName,
                lastName and photo

        Returns:
            The stored user
        """
        clerk_id = record.get("clerkId")
        if not clerk_id:
            raise ValueError("record must contain a clerkId")

        with self._lock:
            data = self._read_data()

            existing = data.get(clerk_id)
            if existing is not None:
                logger.info(f"User {clerk_id} already exists, returning stored record")
                return existing

            now = _utcnow()
            user = {
                "_id": uuid.uuid4().hex,
                **record,
                "createdAt": now,
                "updatedAt": now,
            }
            data[clerk_id] = user

            self._write_data(data)
            return user

    def update_user(self, clerk_id: str, record: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Merge an update record into an existing user.

        Args:
            clerk_id: Clerk user ID
            record: Fields to overwrite

        Returns:
            The updated user, or None if no user has this Clerk ID
        """
        with self._lock:
            data = self._read_data()

            user = data.get(clerk_id)
            if user is None:
                return None

            # Identity fields are never overwritten by an update
            changes = {k: v for k, v in record.items() if k not in ("_id", "clerkId", "createdAt")}
            user.update(changes)
            user["updatedAt"] = _utcnow()

            self._write_data(data)
            return user

    def delete_user(self, clerk_id: str) -> Optional[Dict[str, Any]]:
        """
        Remove user from the store.

        Args:
            clerk_id: Clerk user ID

        Returns:
            The removed user, or None if no user has this Clerk ID
        """
        with self._lock:
            data = self._read_data()

            user = data.pop(clerk_id, None)
            if user is not None:
                self._write_data(data)

            return user

    def get_user(self, clerk_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve user by Clerk ID.

        Returns:
            User record or None if user not found
        """
        with self._lock:
            data = self._read_data()
            return data.get(clerk_id)

    def get_user_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve user by internal ID.

        Useful for resolving the ``userId`` public metadata found on a Clerk user.
        """
        with self._lock:
            data = self._read_data()

            for user in data.values():
                if user.get("_id") == user_id:
                    return user

            return None

    def list_all_users(self) -> List[Dict[str, Any]]:
        """List all users in the store."""
        with self._lock:
            data = self._read_data()
            return list(data.values())
