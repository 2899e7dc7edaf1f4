"""VPN supervisor — wires the checker, account manager and connection loop."""

import logging

from vpnkeeper.config.settings import SupervisorSettings
from vpnkeeper.core.account import AccountManager
from vpnkeeper.core.client import CommandRunner, MullvadClient, SubprocessRunner
from vpnkeeper.core.models import SuperviseReport
from vpnkeeper.core.pacing import Pacer
from vpnkeeper.core.parsers import StatusPatterns
from vpnkeeper.core.secrets import SecretStore, store_from_settings
from vpnkeeper.core.supervisor import ConnectionSupervisor, SupervisionPolicy
from vpnkeeper.core.update_checker import Updater, VersionChecker
from vpnkeeper.network.detector import DaemonController

logger = logging.getLogger(__name__)


class VpnKeeper:
    """One object per invocation; owns the shared client and pacer."""

    def __init__(self, settings: SupervisorSettings,
                 runner: CommandRunner | None = None,
                 pacer: Pacer | None = None,
                 store: SecretStore | None = None):
        self.settings = settings
        self.runner = runner or SubprocessRunner(settings.command_timeout)
        self.pacer = pacer or Pacer()

        self.client = MullvadClient(self.runner, settings.mullvad_cli)
        self.daemon = DaemonController(self.runner, settings.restart_commands)
        self.accounts = AccountManager(self.client, store or store_from_settings(settings))
        self.updater = Updater(
            self.pacer,
            installer_name=settings.installer_name,
            installer_args=settings.installer_args,
            settle_seconds=settings.installer_settle_seconds,
        )
        self.versions = VersionChecker(
            self.client, self.updater, self.pacer,
            install_dir=settings.install_dir,
            download_url=settings.download_url,
            retries=settings.update_retries,
        )
        self.connection = ConnectionSupervisor(
            self.client, self.accounts, self.daemon, self.pacer,
            patterns=StatusPatterns.from_settings(settings),
            policy=SupervisionPolicy.from_settings(settings),
        )

    def cancel(self):
        self.pacer.cancel()

    def check_version(self) -> bool:
        return self.versions.check_version()

    def assert_account(self) -> bool:
        return self.accounts.assert_account()

    def get_status(self, required: bool = False) -> bool:
        return self.connection.get_status(required)

    def run(self) -> SuperviseReport:
        """Full cycle: update the client, make sure of the account, connect."""
        report = SuperviseReport()
        report.up_to_date = self.check_version()
        if self.pacer.cancelled:
            logger.info("Cycle cancelled after version check")
            return report
        report.account_ready = self.assert_account()
        if not report.account_ready:
            logger.warning("Continuing without a configured account")
        if self.pacer.cancelled:
            logger.info("Cycle cancelled after account check")
            return report
        report.connected = self.get_status(required=True)
        logger.info("Cycle finished: up_to_date=%s account_ready=%s connected=%s",
                    report.up_to_date, report.account_ready, report.connected)
        return report
