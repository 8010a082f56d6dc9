"""
In-memory user store for the storefront server

A stand-in for a real database: rows live only as long as the process. The
raw-query entry point mimics a SQL endpoint by matching substrings of the
query text, so it understands exactly the statements the auth routes issue.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from token_codec import format_timestamp

SEED_USER = {"email": "demo@example.com", "password": "password123"}


class UserRepository:
    """Users keyed by unique email; ids are assigned sequentially."""

    def __init__(self, seed: bool = True):
        self._users: List[Dict[str, Any]] = []
        self._next_id = 1
        if seed:
            self.create_user(SEED_USER["email"], SEED_USER["password"])

    def _now(self) -> str:
        return format_timestamp(datetime.now(timezone.utc))

    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        for user in self._users:
            if user["email"] == email:
                return user
        return None

    def create_user(self, email: str, password: str) -> Dict[str, Any]:
        """Append a user row and return it. Uniqueness is the caller's job."""
        user = {
            "id": self._next_id,
            "email": email,
            "password": password,
            "created_at": self._now(),
        }
        self._next_id += 1
        self._users.append(user)
        return user

    def count(self) -> int:
        return len(self._users)


def execute_query(repo: UserRepository, query: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
    """
    Run a raw query against *repo* and return the result rows.

    Only two shapes are recognised, checked in this order:

    - ``SELECT ... users WHERE email ...`` -- the full row for ``params[0]``
      (this also covers ``SELECT id FROM users WHERE email``)
    - ``INSERT INTO users ...`` -- inserts ``(email, password)`` and returns
      ``{id, email}``

    Anything else returns no rows.
    """
    params = list(params or [])

    if "SELECT" in query and "users WHERE email" in query:
        email = params[0] if params else None
        user = repo.get_user_by_email(email)
        return [dict(user)] if user else []

    if "INSERT INTO users" in query:
        email, password = (params + [None, None])[:2]
        user = repo.create_user(email, password)
        return [{"id": user["id"], "email": user["email"]}]

    return []
