"""Extraction helpers for SSO login pages and API responses.

These functions only look at response bodies, so they can be tested against
captured pages without any network access.
"""

import json
import re
from typing import Optional

LOGIN_TOKEN_PATTERN = re.compile(r'name="lt"\s+value="([^"]+)"')
SERVICE_TICKET_PATTERN = re.compile(r"ticket=([^']+)'")
ACCOUNT_LOCKED_MARKER = "locked"


def extract_login_token(body: str) -> Optional[str]:
    """Return the ``lt`` hidden-field value of the SSO login form, if any."""
    match = LOGIN_TOKEN_PATTERN.search(body or "")
    return match.group(1) if match else None


def extract_service_ticket(body: str) -> Optional[str]:
    """Return the service ticket embedded in the post-login redirect snippet.

    The login response carries something like
    ``var response_url = '...?ticket=ST-0123-abc-cas';``.
    """
    match = SERVICE_TICKET_PATTERN.search(body or "")
    return match.group(1) if match else None


def is_account_locked(body: str) -> bool:
    return ACCOUNT_LOCKED_MARKER in (body or "")


def extract_username(body: str) -> str:
    """Return the ``username`` of a "who am I" response, stripped.

    Anything that is not a JSON object with a string username yields "".
    """
    try:
        data = json.loads(body or "")
    except ValueError:
        return ""
    if not isinstance(data, dict):
        return ""
    username = data.get("username")
    if not isinstance(username, str):
        return ""
    return username.strip()
