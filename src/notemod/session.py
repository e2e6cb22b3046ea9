"""
Module: session

Purpose:
    Login gate for the editor. When authentication is required, a login
    stores a random token with an expiry in a small JSON file; later runs
    restore it until it expires. When authentication is not required the
    session is always logged in.

    The state is explicit: a session does nothing until `init()` is called,
    and `teardown()` clears it.

Key Classes:
    - AuthSession: init / login / teardown around a JSON token file

Dependencies:
    - json (std)
    - secrets (std): Token and credential comparison

Used By:
    - cli: Gates commands when NOTEMOD_AUTHENTICATION is set
"""

from __future__ import annotations

import json
import logging
import secrets
import time
import uuid
from pathlib import Path
from typing import Callable, Dict, Optional

from notemod.config import EditorConfig
from notemod.core.errors import AuthenticationError

logger = logging.getLogger(__name__)


class AuthSession:
    """
    Authentication state backed by `config.session_path`.

    Example:
        >>> session = AuthSession(EditorConfig.from_env())
        >>> if not session.init():
        ...     session.login("alice", "secret")
    """

    def __init__(self, config: EditorConfig, *, clock: Callable[[], float] = time.time):
        self.config = config
        self.path: Path = config.session_path
        self._clock = clock
        self._logged_in = False

    @property
    def is_authenticated(self) -> bool:
        """True once init() or login() succeeded and the token is still valid."""
        if not self.config.auth_required:
            return self._logged_in
        if not self._logged_in:
            return False
        if self._token_expired(self._read_token()):
            self.teardown()
            return False
        return True

    def init(self) -> bool:
        """
        Restore state. Returns whether the session is logged in.

        Without required auth the session logs in automatically. Otherwise a
        stored token is restored if present and not expired; an expired or
        unreadable token file is cleared.
        """
        if not self.config.auth_required:
            self._logged_in = True
            return True

        record = self._read_token()
        if record is None:
            self._logged_in = False
        elif self._token_expired(record):
            logger.info("Stored login has expired")
            self.teardown()
        else:
            self._logged_in = True
        return self._logged_in

    def login(self, username: str, password: str) -> None:
        """
        Check credentials and store a new token.

        Raises:
            AuthenticationError: If credentials are not configured or do not
                match
        """
        if not self.config.auth_required:
            self._logged_in = True
            return

        expected_user = self.config.username
        expected_password = self.config.password
        if not expected_user or not expected_password:
            raise AuthenticationError("NOTEMOD_USERNAME or NOTEMOD_PASSWORD not configured")

        user_ok = secrets.compare_digest(username.encode(), expected_user.encode())
        password_ok = secrets.compare_digest(password.encode(), expected_password.encode())
        if not (user_ok and password_ok):
            logger.warning("Login rejected: invalid credentials")
            raise AuthenticationError("Invalid username or password")

        expiry_ms = int((self._clock() + self.config.session_ttl_hours * 3600) * 1000)
        self._write_token({"token": str(uuid.uuid4()), "expiry": expiry_ms})
        self._logged_in = True
        logger.info("Logged in")

    def teardown(self) -> None:
        """Log out and remove the stored token."""
        self._logged_in = False
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass

    # ─────────────────────────────────────────────────────────────────────────
    # Token File
    # ─────────────────────────────────────────────────────────────────────────

    def _read_token(self) -> Optional[Dict[str, object]]:
        if not self.path.exists():
            return None
        try:
            record = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return None
        if not isinstance(record, dict) or not record.get("token"):
            return None
        return record

    def _write_token(self, record: Dict[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(record), encoding="utf-8")

    def _token_expired(self, record: Optional[Dict[str, object]]) -> bool:
        if record is None:
            return True
        expiry = record.get("expiry")
        if isinstance(expiry, bool) or not isinstance(expiry, (int, float)):
            return True
        return self._clock() * 1000 > expiry
