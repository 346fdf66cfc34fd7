"""Shared fixtures: isolated paths and a scripted connector."""

import pytest

from fitness_connect.connector import Response


class FakeConnector:
    """Connector double that replays scripted responses and records calls."""

    def __init__(self, responses=None, identifier="fake"):
        self.identifier = identifier
        self.responses = list(responses or [])
        self.events = []
        self.closed = False

    @property
    def calls(self):
        return [e for e in self.events if e[0] in ("GET", "POST")]

    @property
    def cleanup_count(self):
        return sum(1 for e in self.events if e[0] == "cleanup")

    @property
    def refresh_count(self):
        return sum(1 for e in self.events if e[0] == "refresh")

    def _next(self, method, url, params, data, follow_redirects):
        self.events.append((method, url, params, data, follow_redirects))
        if not self.responses:
            raise AssertionError(f"Unexpected {method} {url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url, params=None, follow_redirects=True):
        return self._next("GET", url, params, None, follow_redirects)

    def post(self, url, params=None, data=None, follow_redirects=True):
        return self._next("POST", url, params, data, follow_redirects)

    def cleanup_session(self):
        self.events.append(("cleanup",))

    def refresh_session(self):
        self.events.append(("refresh",))

    def close(self):
        self.closed = True


def ok(body="", status=200, redirect_url=None):
    return Response(body=body, status_code=status, redirect_url=redirect_url)


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point every on-disk location at a temporary directory."""
    monkeypatch.setattr("fitness_connect.config.Config.DATA_DIR", tmp_path / "data")
    monkeypatch.setattr("fitness_connect.config.Config.LOGS_DIR", tmp_path / "logs")
    monkeypatch.setattr("fitness_connect.config.Config.DOWNLOADS_DIR", tmp_path / "downloads")
    monkeypatch.setattr("fitness_connect.config.Config.SESSION_DIR", tmp_path / "sessions")
    monkeypatch.setattr("fitness_connect.config.Config.DATABASE_PATH", tmp_path / "data" / "test.db")
    return tmp_path
