"""Customer account storage for storefront."""

from typing import Any

from .errors import UserExistsError
from .json_store import SCHEMA_VERSION, JsonFileStore
from .models import User


class UserStore(JsonFileStore):
    """Manages registered customer accounts. Emails are unique."""

    FILENAME = "users.json"

    def empty_document(self) -> dict[str, Any]:
        return {"schema_version": SCHEMA_VERSION, "next_user_id": 1, "users": []}

    def create_user(self, name: str, email: str, password_hash: str) -> User:
        """
        Add a user.

        Raises:
            UserExistsError: If the email is already registered.
        """
        email = email.strip().lower()
        with self.transaction() as data:
            if any(u["email"] == email for u in data.get("users", [])):
                raise UserExistsError(email)
            user = User(
                id=self._next_id(data, "next_user_id"),
                name=name,
                email=email,
                password_hash=password_hash,
            )
            data["users"].append(user.to_dict())
        return user

    def get_user_by_email(self, email: str) -> User | None:
        email = (email or "").strip().lower()
        data = self._load_data()
        for u in data.get("users", []):
            if u["email"] == email:
                return User.from_dict(u)
        return None

    def get_user(self, user_id: int) -> User | None:
        data = self._load_data()
        for u in data.get("users", []):
            if u["id"] == user_id:
                return User.from_dict(u)
        return None
