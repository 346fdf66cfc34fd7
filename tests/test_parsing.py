"""Tests for SSO page and API response extraction."""

from fitness_connect.parsing import (
    extract_login_token,
    extract_service_ticket,
    extract_username,
    is_account_locked,
)

LOGIN_PAGE = """
<form method="post" id="login-form">
    <input type="text" name="username" value="" />
    <input type="password" name="password" value="" />
    <input type="hidden" name="lt"       value="LT-2741-ab0CdEf9-cas" />
    <input type="hidden" name="_eventId" value="submit" />
</form>
"""

LOGIN_PAGE_WITHOUT_TOKEN = """
<form method="post" id="login-form">
    <input type="hidden" name="_eventId" value="submit" />
</form>
"""

SUCCESS_RESPONSE = """
<script type="text/javascript">
    var redirectAfterAccountLoginUrl = "https://connect.garmin.com/modern";
    var response_url = 'https://connect.garmin.com/post-auth/login?ticket=ST-0451980-Xy7gHzq9-cas';
</script>
"""

LOCKED_RESPONSE = """
<div id="status">Your account is locked. Please try again later.</div>
"""

FAILED_RESPONSE = """
<div id="status">Invalid sign in. (Passwords are case sensitive.)</div>
"""


def test_extract_login_token():
    assert extract_login_token(LOGIN_PAGE) == "LT-2741-ab0CdEf9-cas"


def test_extract_login_token_missing():
    assert extract_login_token(LOGIN_PAGE_WITHOUT_TOKEN) is None
    assert extract_login_token("") is None


def test_extract_login_token_requires_exact_attribute_order():
    page = '<input type="hidden" value="LT-1" name="lt" />'
    assert extract_login_token(page) is None


def test_extract_service_ticket():
    assert extract_service_ticket(SUCCESS_RESPONSE) == "ST-0451980-Xy7gHzq9-cas"


def test_extract_service_ticket_needs_single_quote_terminator():
    assert extract_service_ticket('href="/login?ticket=ST-1"') is None


def test_extract_service_ticket_missing():
    assert extract_service_ticket(FAILED_RESPONSE) is None
    assert extract_service_ticket(None) is None


def test_account_locked_detection():
    assert is_account_locked(LOCKED_RESPONSE) is True
    assert is_account_locked(FAILED_RESPONSE) is False
    assert is_account_locked("") is False


def test_account_locked_is_case_sensitive():
    assert is_account_locked("Account LOCKED") is False


def test_extract_username():
    assert extract_username('{"username": "runner42"}') == "runner42"


def test_extract_username_strips_whitespace():
    assert extract_username('{"username": "   "}') == ""
    assert extract_username('{"username": " runner42\\n"}') == "runner42"


def test_extract_username_invalid_bodies():
    assert extract_username("") == ""
    assert extract_username("<html>Sign in</html>") == ""
    assert extract_username("[]") == ""
    assert extract_username('{"username": null}') == ""
    assert extract_username('{"displayName": "runner"}') == ""
