"""User Store - durable user records kept in a JSON file"""
import os
import json
import time
import logging
from typing import Optional, Dict, List
from datetime import datetime, timezone
from threading import Lock
from passlib.context import CryptContext

from services.errors import DuplicateEmail

logger = logging.getLogger(__name__)

USERS_FILE = os.path.join("data", "users.json")

# New hashes use pbkdf2_sha256; bcrypt hashes written by older deployments still verify
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except Exception as e:
        logger.warning(f"Password hash could not be verified: {e}")
        return False


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class UserStore:
    """
    Ordered collection of user records, indexed by email.

    The whole collection is held in memory and rewritten to disk after every
    mutation. All mutations run under a single lock.
    """

    def __init__(self, users_file: Optional[str] = None):
        self.users_file = users_file or os.getenv("AUTH_USERS_FILE", USERS_FILE)
        self._lock = Lock()
        self._users: List[Dict] = []
        self._by_email: Dict[str, Dict] = {}
        self._last_id = 0
        self._ensure_file()
        self._reload()

    def _ensure_file(self):
        folder = os.path.dirname(self.users_file)
        if folder:
            os.makedirs(folder, exist_ok=True)
        if not os.path.exists(self.users_file):
            self.persist_all([])

    def _reload(self):
        users = self.load_all()
        changed = False
        for u in users:
            if self._upgrade_legacy_password(u):
                changed = True
        self._users = users
        self._by_email = {}
        for u in users:
            if u.get("email") in self._by_email:
                logger.warning(f"Duplicate email in {self.users_file}: {u.get('email')}; keeping first record")
                continue
            self._by_email[u.get("email")] = u
        self._last_id = max((int(u.get("id") or 0) for u in users), default=0)
        if changed:
            self.persist_all(self._users)

    def _upgrade_legacy_password(self, user: Dict) -> bool:
        """Replace a plaintext password from an older users file with a hash."""
        if "password" not in user:
            return False
        plain = user.pop("password")
        if not user.get("passwordHash"):
            user["passwordHash"] = hash_password(plain)
        logger.info(f"Upgraded plaintext password for user id={user.get('id')}")
        return True

    def _next_id(self) -> int:
        self._last_id = max(self._last_id + 1, int(time.time() * 1000))
        return self._last_id

    @staticmethod
    def _public(user: Optional[Dict]) -> Optional[Dict]:
        if user is None:
            return None
        safe = user.copy()
        safe.pop("passwordHash", None)
        return safe

    # --- full-collection I/O ---
    def load_all(self) -> List[Dict]:
        """Read every record from disk in stored order."""
        with open(self.users_file, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"{self.users_file} must contain a JSON list of users")
        return data

    def persist_all(self, users: List[Dict]):
        """Write the whole collection, replacing the file atomically."""
        tmp_path = f"{self.users_file}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(users, f, indent=2)
        os.replace(tmp_path, self.users_file)

    # --- lookups ---
    def find_by_email(self, email: str) -> Optional[Dict]:
        with self._lock:
            return self._public(self._by_email.get(email))

    def find_by_username(self, username: str) -> Optional[Dict]:
        with self._lock:
            for u in self._users:
                if u.get("username") == username:
                    return self._public(u)
        return None

    def find_by_credentials(self, username: str, password: str) -> Optional[Dict]:
        """First record with this exact username whose password verifies."""
        with self._lock:
            candidates = [u for u in self._users if u.get("username") == username]
        for u in candidates:
            if verify_password(password, u.get("passwordHash", "")):
                return self._public(u)
        return None

    def count(self) -> int:
        with self._lock:
            return len(self._users)

    # --- mutations ---
    def append(self, user: Dict) -> Dict:
        """
        Add a new user record

        Args:
            user: Dictionary with username, email and plaintext password

        Returns:
            The stored record without its password hash
        """
        with self._lock:
            email = user["email"]
            if email in self._by_email:
                raise DuplicateEmail()
            record = {
                "id": self._next_id(),
                "username": user["username"],
                "email": email,
                "passwordHash": hash_password(user["password"]),
                "createdAt": _now_iso(),
            }
            self.persist_all(self._users + [record])
            self._users.append(record)
            self._by_email[email] = record
            return self._public(record)

    def update_password(self, email: str, new_password: str) -> bool:
        """Re-hash the password of the user with this email. False if no such user."""
        with self._lock:
            user = self._by_email.get(email)
            if user is None:
                return False
            updated = dict(user, passwordHash=hash_password(new_password))
            users = [updated if u is user else u for u in self._users]
            self.persist_all(users)
            self._users = users
            self._by_email[email] = updated
            return True
