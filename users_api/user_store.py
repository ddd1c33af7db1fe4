import logging
import threading
from itertools import islice
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10


class User(BaseModel):
    id: int = Field(ge=0)
    name: str
    email: str
    age: int = Field(ge=0)


class UserNotFound(Exception):
    def __init__(self, user_id: int):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class UserStore:
    """In-memory map of user id -> User, shared by all request handlers.

    Every operation holds the lock for its whole body, so reading the
    current max id and inserting the new user in create() are one step.
    Callers always get copies, never the stored objects.
    """

    def __init__(self, users: Optional[Iterable[User]] = None):
        self._lock = threading.Lock()
        self._users: Dict[int, User] = {}
        for user in users or ():
            self._users[user.id] = user.model_copy()

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    def list(self, limit: int = DEFAULT_LIMIT, offset: int = 0) -> Tuple[List[User], int]:
        """Return one page of users and the total number stored."""
        if limit < 0 or offset < 0:
            raise ValueError("limit and offset must be non-negative")
        with self._lock:
            page = [u.model_copy() for u in islice(self._users.values(), offset, offset + limit)]
            return page, len(self._users)

    def get(self, user_id: int) -> User:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise UserNotFound(user_id)
            return user.model_copy()

    def create(self, name: str, email: str, age: int) -> User:
        with self._lock:
            user_id = max(self._users, default=0) + 1
            user = User(id=user_id, name=name, email=email, age=age)
            self._users[user_id] = user
        logger.info("Created user %d", user_id)
        return user.model_copy()

    def update(self, user_id: int, name: str, email: str, age: int) -> User:
        with self._lock:
            if user_id not in self._users:
                raise UserNotFound(user_id)
            user = User(id=user_id, name=name, email=email, age=age)
            self._users[user_id] = user
        logger.info("Updated user %d", user_id)
        return user.model_copy()

    def delete(self, user_id: int) -> None:
        with self._lock:
            if self._users.pop(user_id, None) is None:
                raise UserNotFound(user_id)
        logger.info("Deleted user %d", user_id)
