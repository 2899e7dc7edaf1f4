"""Supervisor settings — persistence via JSON."""

import json
import logging
import os
import sys
from dataclasses import dataclass, field, asdict

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = os.path.join(os.environ.get('LOCALAPPDATA', '.'), 'VPNKeeper')

DEFAULT_DOWNLOAD_URL = "https://mullvad.net/download/app/exe/latest"


def default_restart_commands() -> list[list[str]]:
    """Service-manager commands that bounce the Mullvad daemon on this platform."""
    if sys.platform == 'win32':
        return [['sc', 'stop', 'MullvadVPN'], ['sc', 'start', 'MullvadVPN']]
    if sys.platform == 'darwin':
        return [['launchctl', 'kickstart', '-k', 'system/net.mullvad.daemon']]
    return [['systemctl', 'restart', 'mullvad-daemon']]


@dataclass
class SupervisorSettings:
    """Persistent supervisor settings."""
    # Paths
    data_dir: str = ""
    mullvad_cli: str = "mullvad"
    install_dir: str = ""
    account_file: str = ""

    # Updater
    download_url: str = DEFAULT_DOWNLOAD_URL
    installer_name: str = "MullvadInstaller.exe"
    installer_args: list[str] = field(default_factory=lambda: ['/S'])
    installer_settle_seconds: float = 5.0
    update_retries: int = 3

    # Account
    token_store: str = "plaintext"          # 'plaintext' or 'encrypted'
    token_passphrase_env: str = "VPNKEEPER_TOKEN_PASSPHRASE"

    # Connection policy
    max_attempts: int = 25                  # loop runs while attempt < max_attempts
    poll_interval: float = 2.0
    blocked_threshold: int = 3
    reconnect_pause: float = 5.0
    restart_pause: float = 60.0
    factory_reset_after: int = 100

    # Status matching
    status_case_sensitive: bool = True
    status_connected: str = "Tunnel status: Connected"
    status_connecting: str = "Tunnel status: Connecting"
    status_blocked: str = "Tunnel status: Blocked"
    status_disconnected: str = "Tunnel Status: Disconnected"

    # Process control
    restart_commands: list[list[str]] = field(default_factory=default_restart_commands)
    command_timeout: float | None = 60.0

    def __post_init__(self):
        if not self.data_dir:
            self.data_dir = DEFAULT_DATA_DIR
        if not self.install_dir:
            self.install_dir = os.path.join(self.data_dir, 'installer')
        if not self.account_file:
            self.account_file = os.path.join(self.data_dir, 'account.txt')

    @staticmethod
    def load(path: str | None = None) -> 'SupervisorSettings':
        """Load settings from JSON. Returns defaults if file doesn't exist."""
        if path is None:
            path = os.path.join(DEFAULT_DATA_DIR, 'settings.json')

        if not os.path.isfile(path):
            logger.info("No settings file, using defaults")
            return SupervisorSettings()

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            settings = SupervisorSettings(**{k: v for k, v in data.items()
                                             if k in SupervisorSettings.__dataclass_fields__})
            logger.info("Loaded settings from %s", path)
            return settings
        except Exception as e:
            logger.warning("Failed to load settings: %s", e)
            return SupervisorSettings()

    def save(self, path: str | None = None):
        """Save settings to JSON."""
        if path is None:
            path = os.path.join(self.data_dir, 'settings.json')

        os.makedirs(os.path.dirname(path) or '.', exist_ok=True)
        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(asdict(self), f, indent=2)
            logger.info("Saved settings to %s", path)
        except Exception as e:
            logger.warning("Failed to save settings: %s", e)

    def ensure_dirs(self):
        """Create data directories if they don't exist."""
        os.makedirs(self.data_dir, exist_ok=True)
        os.makedirs(os.path.join(self.data_dir, 'logs'), exist_ok=True)
        os.makedirs(self.install_dir, exist_ok=True)
