"""Account management service - stored logins for the CLI."""

import logging
from typing import Optional

from fitness_connect.auth import session_identifier
from fitness_connect.clients.garmin import GarminConnectClient
from fitness_connect.connector import Connector
from fitness_connect.crypto import decrypt_password, encrypt_password
from fitness_connect.database import (
    delete_account as db_delete_account,
    get_account as db_get_account,
    has_account as db_has_account,
    list_accounts as db_list_accounts,
    save_account as db_save_account,
)

logger = logging.getLogger(__name__)


class AccountService:
    """Service for managing stored accounts (one per username)."""

    def configure(self, username: str, password: str):
        """Store the password of a username, encrypted."""
        if not username or not password:
            raise ValueError("Username and password are required")
        db_save_account(username, encrypt_password(password))
        logger.info(f"Configured account for {username}")

    def list_accounts(self) -> list:
        """List stored accounts with whether a cached session exists."""
        accounts = db_list_accounts()
        for acc in accounts:
            acc.pop('password_encrypted', None)
            acc['identifier'] = session_identifier(acc['username'])
        return accounts

    def is_configured(self, username: str) -> bool:
        return db_has_account(username)

    def get_password(self, username: str) -> Optional[str]:
        """Return the decrypted stored password, or None."""
        account = db_get_account(username)
        if not account:
            return None
        return decrypt_password(account['password_encrypted'])

    def remove_account(self, username: str) -> bool:
        """Remove the stored account and its cached session."""
        result = db_delete_account(username)
        self.clear_session(username)
        if result:
            logger.info(f"Removed account {username}")
        return result

    def clear_session(self, username: str):
        """Wipe the cached cookies of a username without logging in."""
        with Connector(session_identifier(username)) as connector:
            connector.cleanup_session()

    def get_client(self, username: str, password: Optional[str] = None) -> GarminConnectClient:
        """Get an authenticated client, falling back to the stored password."""
        if password is None:
            password = self.get_password(username)
        return GarminConnectClient(username, password)
