"""HTTP connector with a persisted, identifier-keyed cookie store.

The connector is the only place that talks to the network. It keeps the
cookies of one user on disk (LWP format) so an authenticated session can be
picked up again by a later process, and it returns an explicit ``Response``
for every call instead of exposing only "last response" state.
"""

import logging
from dataclasses import dataclass
from http.cookiejar import LoadError, LWPCookieJar
from pathlib import Path
from typing import Any, Callable, Mapping, Optional
from urllib.parse import urljoin

import requests

from fitness_connect.config import Config
from fitness_connect.exceptions import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Response:
    """Outcome of a single HTTP call."""

    body: str
    status_code: int
    redirect_url: Optional[str] = None
    url: str = ""

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status_code < 400


class Connector:
    """Performs GET/POST calls on behalf of one session identifier."""

    def __init__(
        self,
        identifier: str,
        session_dir: Optional[Path] = None,
        timeout: Optional[float] = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ):
        self.identifier = identifier
        self.session_dir = Path(session_dir) if session_dir else Config.SESSION_DIR
        self.timeout = timeout if timeout is not None else Config.REQUEST_TIMEOUT
        self._session_factory = session_factory
        self._session: Optional[requests.Session] = None
        self._jar: Optional[LWPCookieJar] = None
        self.last_status_code: Optional[int] = None
        self.last_redirect_url: Optional[str] = None
        self._start_transport()

    @property
    def cookie_path(self) -> Path:
        return self.session_dir / f"{self.identifier}.cookies"

    @property
    def cookies(self) -> LWPCookieJar:
        return self._jar

    def _start_transport(self):
        """Create a fresh HTTP session backed by the persisted cookie file."""
        jar = LWPCookieJar(str(self.cookie_path))
        if self.cookie_path.exists():
            try:
                jar.load(ignore_discard=True, ignore_expires=True)
            except (LoadError, OSError) as e:
                logger.warning(f"Ignoring unreadable cookie store {self.cookie_path}: {e}")
                jar.clear()

        session = self._session_factory()
        session.cookies = jar
        session.headers.update({"User-Agent": Config.USER_AGENT})

        self._session = session
        self._jar = jar

    def _save_cookies(self):
        self.session_dir.mkdir(parents=True, exist_ok=True)
        self._jar.save(ignore_discard=True, ignore_expires=True)

    def _request(
        self,
        method: str,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        data: Optional[Mapping[str, Any]] = None,
        follow_redirects: bool = True,
    ) -> Response:
        if self._session is None:
            # Closed earlier; pick the persisted cookies up again
            self._start_transport()
        try:
            resp = self._session.request(
                method,
                url,
                params=params,
                data=data,
                allow_redirects=follow_redirects,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise TransportError(f"{method} {url} failed: {e}") from e

        redirect_url = None
        location = resp.headers.get("Location")
        if location and 300 <= resp.status_code < 400:
            redirect_url = urljoin(resp.url or url, location)

        self.last_status_code = resp.status_code
        self.last_redirect_url = redirect_url
        self._save_cookies()

        logger.debug(f"{method} {url} -> {resp.status_code}")
        return Response(
            body=resp.text,
            status_code=resp.status_code,
            redirect_url=redirect_url,
            url=resp.url or url,
        )

    def get(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        follow_redirects: bool = True,
    ) -> Response:
        """Issue a GET request."""
        return self._request("GET", url, params=params, follow_redirects=follow_redirects)

    def post(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        data: Optional[Mapping[str, Any]] = None,
        follow_redirects: bool = True,
    ) -> Response:
        """Issue a POST request with form-encoded ``data``."""
        return self._request(
            "POST", url, params=params, data=data, follow_redirects=follow_redirects
        )

    def cleanup_session(self):
        """Forget every cookie stored for this identifier."""
        self._jar.clear()
        self.cookie_path.unlink(missing_ok=True)
        logger.debug(f"Cleared cookie store for {self.identifier}")

    def refresh_session(self):
        """Restart the transport, keeping the persisted cookie store."""
        if self._jar is not None and len(self._jar):
            self._save_cookies()
        if self._session is not None:
            self._session.close()
        self._start_transport()
        logger.debug(f"Restarted transport for {self.identifier}")

    def close(self):
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
