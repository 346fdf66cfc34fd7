"""Session establishment for Garmin Connect.

There is no public authentication API, so logging in means replaying what a
browser does against the SSO (CAS-style) login service:

1. check ``/user/username`` with the cached cookies and stop if it answers,
2. otherwise fetch the SSO login page and scrape the ``lt`` token,
3. submit the credentials and scrape the service ticket,
4. redeem the ticket, follow exactly one redirect,
5. restart the transport so the new cookies are used on a fresh page load.

Cookies are persisted per session identifier (an MD5 of the username) by the
``Connector``, so the next process can usually skip straight past step 1.
"""

import hashlib
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from fitness_connect.config import Config
from fitness_connect.connector import Connector
from fitness_connect.exceptions import (
    AuthenticationError,
    IllegalTransitionError,
    PreconditionError,
    TransportError,
    UnexpectedResponseCodeError,
)
from fitness_connect.parsing import (
    extract_login_token,
    extract_service_ticket,
    extract_username,
    is_account_locked,
)

logger = logging.getLogger(__name__)

USERNAME_URL = f"{Config.CONNECT_BASE_URL}/user/username"


class AuthState(Enum):
    UNAUTHENTICATED = "unauthenticated"
    COOKIE_CHECK_IN_PROGRESS = "cookie_check_in_progress"
    SSO_LOGIN_STARTED = "sso_login_started"
    CREDENTIALS_SUBMITTED = "credentials_submitted"
    TICKET_ISSUED = "ticket_issued"
    TICKET_REDEEMED = "ticket_redeemed"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"
    LOGGED_OUT = "logged_out"


_TRANSITIONS = {
    AuthState.UNAUTHENTICATED: {AuthState.COOKIE_CHECK_IN_PROGRESS},
    # A rejected cookie is abandoned here: the store is wiped before SSO starts.
    AuthState.COOKIE_CHECK_IN_PROGRESS: {AuthState.AUTHENTICATED, AuthState.SSO_LOGIN_STARTED},
    AuthState.SSO_LOGIN_STARTED: {AuthState.CREDENTIALS_SUBMITTED},
    AuthState.CREDENTIALS_SUBMITTED: {AuthState.TICKET_ISSUED},
    AuthState.TICKET_ISSUED: {AuthState.TICKET_REDEEMED},
    AuthState.TICKET_REDEEMED: {AuthState.AUTHENTICATED},
    # Only an explicit logout leaves AUTHENTICATED.
    AuthState.AUTHENTICATED: {AuthState.LOGGED_OUT},
    AuthState.FAILED: set(),
    AuthState.LOGGED_OUT: set(),
}

_SSO_STATES = {
    AuthState.SSO_LOGIN_STARTED,
    AuthState.CREDENTIALS_SUBMITTED,
    AuthState.TICKET_ISSUED,
    AuthState.TICKET_REDEEMED,
}

_identifier_locks: dict[str, threading.Lock] = {}
_identifier_locks_guard = threading.Lock()


def _lock_for(identifier: str) -> threading.Lock:
    """Return the process-wide lock serialising logins for one identifier."""
    with _identifier_locks_guard:
        return _identifier_locks.setdefault(identifier, threading.Lock())


def session_identifier(username: str) -> str:
    """Derive the cookie-store key for a username (one-way, deterministic)."""
    return hashlib.md5(username.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class Credentials:
    username: str
    password: Optional[str] = None

    def __repr__(self):
        masked = "***" if self.password else None
        return f"Credentials(username={self.username!r}, password={masked!r})"


class AuthSessionManager:
    """Owns a Connector and makes sure its session is authenticated.

    Authentication runs once, from the constructor. The password is only
    held by the ``Credentials`` value passed to ``ensure_authenticated`` and
    is never stored on the manager.
    """

    def __init__(
        self,
        username: str,
        password: Optional[str] = None,
        connector: Optional[Connector] = None,
        *,
        session_dir: Optional[Path] = None,
        timeout: Optional[float] = None,
    ):
        if not username:
            raise PreconditionError("Username credential missing")

        self._identifier = session_identifier(username)
        self._connector = connector or Connector(
            self._identifier, session_dir=session_dir, timeout=timeout
        )
        self._state = AuthState.UNAUTHENTICATED
        self._attempted = False
        self._used_cached_session = False

        self.ensure_authenticated(Credentials(username, password))

    @property
    def identifier(self) -> str:
        return self._identifier

    @property
    def connector(self) -> Connector:
        return self._connector

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state is AuthState.AUTHENTICATED

    @property
    def used_cached_session(self) -> bool:
        """True when the cached cookies were valid and no login was needed."""
        return self._used_cached_session

    def _transition(self, new_state: AuthState):
        if new_state not in _TRANSITIONS[self._state]:
            raise IllegalTransitionError(
                f"Cannot move from {self._state.value} to {new_state.value}"
            )
        logger.debug(f"Auth state {self._state.value} -> {new_state.value}")
        self._state = new_state

    def _require(self, state: AuthState):
        if self._state is not state:
            raise IllegalTransitionError(
                f"Expected state {state.value}, currently {self._state.value}"
            )

    def ensure_authenticated(self, credentials: Credentials):
        """Reuse the cached session or run the full SSO login.

        Raises:
            PreconditionError: the cached session is invalid and no password
                was supplied.
            AuthenticationError: the SSO service rejected the login.
            UnexpectedResponseCodeError: ticket redemption did not redirect.
            TransportError: a request failed during the SSO exchange.
        """
        if self._attempted:
            raise IllegalTransitionError("Authentication was already attempted")
        self._attempted = True

        with _lock_for(self._identifier):
            try:
                self._transition(AuthState.COOKIE_CHECK_IN_PROGRESS)
                if self._check_cookie_auth():
                    self._used_cached_session = True
                    self._transition(AuthState.AUTHENTICATED)
                    logger.info(f"Reusing cached session for {credentials.username}")
                    return

                if not credentials.password:
                    raise PreconditionError("Password credential missing")

                self._authorize(credentials)
                logger.info(f"Successfully logged in as {credentials.username}")
            except Exception as e:
                self._fail(e)
                raise

    def _fail(self, error: Exception):
        if self._state in _SSO_STATES:
            # Never leave a half-established session behind
            self._connector.cleanup_session()
            self._connector.refresh_session()
        logger.error(f"Authentication failed in state {self._state.value}: {error}")
        self._state = AuthState.FAILED

    def _check_cookie_auth(self) -> bool:
        """Return True if the cached cookies still identify a user."""
        try:
            response = self._connector.get(USERNAME_URL)
            username = extract_username(response.body)
        except TransportError as e:
            logger.warning(f"Cookie check failed, falling back to login: {e}")
            username = ""

        if username:
            return True

        logger.info("Cached session is not valid, starting SSO login")
        self._connector.cleanup_session()
        self._connector.refresh_session()
        return False

    def _authorize(self, credentials: Credentials):
        sso_params = {
            "service": Config.SSO_SERVICE_URL,
            "clientId": Config.SSO_CLIENT_ID,
            "consumeServiceTicket": "false",
        }

        self._transition(AuthState.SSO_LOGIN_STARTED)
        response = self._connector.get(Config.SSO_LOGIN_URL, params=sso_params)
        if response.status_code != 200:
            raise AuthenticationError(
                f"SSO prestart error (code: {response.status_code}, message: {response.body})",
                status_code=response.status_code,
                body=response.body,
            )

        login_token = extract_login_token(response.body)
        if not login_token:
            raise AuthenticationError('"lt" value wasn\'t found in response')

        form = {
            "username": credentials.username,
            "password": credentials.password,
            "_eventId": "submit",
            "embed": "true",
            "displayNameRequired": "false",
            "lt": login_token,
        }
        response = self._connector.post(
            Config.SSO_LOGIN_URL, params=sso_params, data=form, follow_redirects=False
        )
        self._transition(AuthState.CREDENTIALS_SUBMITTED)

        ticket = extract_service_ticket(response.body)
        if not ticket:
            if is_account_locked(response.body):
                raise AuthenticationError(
                    "Looks like your account has been locked. "
                    f"Please access {Config.CONNECT_BASE_URL}",
                    status_code=response.status_code,
                    locked=True,
                )
            raise AuthenticationError(
                "Looks like the authentication failed", status_code=response.status_code
            )
        self._transition(AuthState.TICKET_ISSUED)

        redirect_url = self._redeem_ticket(ticket)
        self._follow_redirect(redirect_url)

        # Cookies only take effect on "a new page load"
        self._connector.refresh_session()
        self._transition(AuthState.AUTHENTICATED)

    def _redeem_ticket(self, ticket: str) -> Optional[str]:
        self._require(AuthState.TICKET_ISSUED)
        response = self._connector.post(
            Config.SSO_SERVICE_URL, data={"ticket": ticket}, follow_redirects=False
        )
        if response.status_code != 302:
            raise UnexpectedResponseCodeError(302, response.status_code)
        self._transition(AuthState.TICKET_REDEEMED)
        return response.redirect_url

    def _follow_redirect(self, redirect_url: Optional[str]):
        self._require(AuthState.TICKET_REDEEMED)
        if not redirect_url:
            raise AuthenticationError("Ticket redemption did not provide a redirect target", 302)
        response = self._connector.get(redirect_url, follow_redirects=False)
        if response.status_code != 302:
            raise UnexpectedResponseCodeError(302, response.status_code)

    def logout(self):
        """Forget the cached session for this user."""
        self._connector.cleanup_session()
        self._connector.refresh_session()
        if self._state is AuthState.AUTHENTICATED:
            self._transition(AuthState.LOGGED_OUT)
        logger.info("Cleared cached session")
