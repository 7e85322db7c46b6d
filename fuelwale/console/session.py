"""
Operator session.

`AuthService` owns the single `Session` of a console process: `login()`
creates it, `logout()` tears it down, `rehydrate()` restores it from the
session file once at start. Screen visibility by role is a convenience
for the operator; the server authorizes every request on its own.
"""

import json
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import List, Optional

from fuelwale.console.client import ApiClient
from fuelwale.console.errors import ApiError, ConsoleValidationError

logger = logging.getLogger("fuelwale.console.auth")

# Screen -> roles that see it
ROLE_SCREENS = {
    "create-depot": ["a"],
    "create-route": ["a"],
    "create-order": ["a", "e", "s"],
    "list-order": ["a", "e", "s"],
    "trip-manager": ["a", "e", "s"],
    "trip-listing": ["a", "e", "tr"],
    "driver-trips": ["d"],
    "driver-deliveries": ["d"],
    "vehicle-master": ["a", "va"],
    "fleet-allocation": ["a", "e", "va", "tr"],
    "customer-master": ["a"],
    "user-master": ["a"],
    "sales-associate-master": ["a"],
    "driver-master": ["a"],
    "employee-master": ["a"],
    "loading-source-master": ["a"],
    "payments": ["a", "ac"],
    "invoice-listing": ["a", "e", "ac"],
}


@dataclass
class Session:
    token: str
    id: int
    user_id: str
    user_type: str

    @classmethod
    def from_login(cls, payload: dict) -> "Session":
        return cls(
            token=payload["accessToken"],
            id=payload["id"],
            user_id=payload["userId"],
            user_type=payload["userType"],
        )


def visible_screens(session: Optional[Session]) -> List[str]:
    if session is None:
        return []
    return [screen for screen, roles in ROLE_SCREENS.items() if session.user_type in roles]


class AuthService:

    def __init__(self, client: ApiClient, session_file: Optional[str] = None):
        self.client = client
        self.session_file = Path(session_file or client.settings.session_file)
        self._rehydrated = False

    @property
    def session(self) -> Optional[Session]:
        return self.client.session

    def _persist(self, session: Session) -> None:
        self.session_file.write_text(json.dumps(asdict(session)))

    def _forget(self) -> None:
        self.client.session = None
        if self.session_file.exists():
            self.session_file.unlink()

    async def login(self, username: str, password: str) -> Session:
        if not username or not password:
            raise ConsoleValidationError("Username and password are required")

        payload = await self.client.post(
            "/auth/login", json={"username": username, "password": password}, fallback="Login failed"
        )
        session = Session.from_login(payload)
        self.client.session = session
        self._persist(session)
        logger.info("Logged in as %s (%s)", session.user_id, session.user_type)
        return session

    async def logout(self) -> None:
        """Revoke the token on the server and drop the local session."""
        if self.client.session is None:
            return
        try:
            await self.client.post("/auth/logout", fallback="Logout failed")
        except ApiError as exc:
            # an expired or already revoked token still ends the local session
            logger.info("Server logout failed: %s", exc.message)
        finally:
            self._forget()

    def rehydrate(self) -> Optional[Session]:
        """Load the persisted session, once per process."""
        if self._rehydrated:
            return self.client.session
        self._rehydrated = True

        if not self.session_file.exists():
            return None
        try:
            data = json.loads(self.session_file.read_text())
            session = Session(**data)
        except (ValueError, TypeError) as exc:
            logger.warning("Discarding unreadable session file %s: %s", self.session_file, exc)
            self._forget()
            return None

        self.client.session = session
        return session

    def screens(self) -> List[str]:
        return visible_screens(self.client.session)
