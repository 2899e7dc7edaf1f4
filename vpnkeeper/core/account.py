"""Account token management."""

import logging

from vpnkeeper.core.client import MullvadClient
from vpnkeeper.core.secrets import SecretStore

logger = logging.getLogger(__name__)

NO_ACCOUNT_SENTINEL = "No account configured"


class AccountManager:
    """Checks and sets the Mullvad account token."""

    def __init__(self, client: MullvadClient, store: SecretStore):
        self.client = client
        self.store = store

    def is_account_set(self) -> bool:
        """True unless the client explicitly reports no account."""
        result = self.client.account_get()
        if NO_ACCOUNT_SENTINEL in result.stdout:
            logger.info("No account configured")
            return False
        return True

    def set_account(self) -> bool:
        """Push the stored token to the client. False if no token is available."""
        with self.store.token() as token:
            if not token:
                logger.warning("No account token available, cannot set account")
                return False
            result = self.client.account_set(token)
        if not result.ok:
            logger.warning("'account set' exited with %d", result.exit_code)
        logger.info("Account token submitted")
        return True

    def assert_account(self) -> bool:
        if self.is_account_set():
            return True
        return self.set_account()
