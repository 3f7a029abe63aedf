"""User directory - the credential verification capability.

The ledger only needs two questions answered: does this username exist, and
does this secret match. ``InMemoryUserDirectory`` answers them for the demo
accounts; a production deployment swaps in a hashed credential store.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Protocol
import hmac


@dataclass(frozen=True)
class UserAccount:
    """Account data exposed to the login flow."""
    user_id: str
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = None


class UserDirectory(Protocol):
    """Credential verification capability."""

    def resolve(self, username: str) -> Optional[UserAccount]:
        ...

    def verify_credentials(self, username: str, secret: str) -> bool:
        ...


DEMO_USERS = (
    (UserAccount("1", "admin", "admin@securebank.com", "Admin User"), "admin123"),
    (UserAccount("2", "user1", "user1@example.com", "John Doe"), "password123"),
    (UserAccount("3", "testuser", "test@example.com", "Test User"), "test123"),
)


class InMemoryUserDirectory:
    """Plain-text demo directory. Secrets are compared in constant time."""

    def __init__(self, users: Iterable = DEMO_USERS):
        self._accounts: Dict[str, UserAccount] = {}
        self._secrets: Dict[str, str] = {}
        for account, secret in users:
            self._accounts[account.username] = account
            self._secrets[account.username] = secret

    def resolve(self, username: str) -> Optional[UserAccount]:
        return self._accounts.get(username)

    def verify_credentials(self, username: str, secret: str) -> bool:
        expected = self._secrets.get(username)
        if expected is None:
            return False
        return hmac.compare_digest(expected.encode("utf-8"), secret.encode("utf-8"))
