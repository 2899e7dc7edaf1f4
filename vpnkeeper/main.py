"""VPNKeeper — entry point."""

import argparse
import logging
import os
import signal
import sys

from vpnkeeper.branding import AppBranding
from vpnkeeper.config.settings import SupervisorSettings
from vpnkeeper.core.keeper import VpnKeeper
from vpnkeeper.core.secrets import EncryptedTokenStore
from vpnkeeper.network.detector import TunnelDetector

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INTERRUPTED = 130


def setup_logging(data_dir: str, verbose: bool = False):
    """Configure logging to file and console."""
    log_dir = os.path.join(data_dir, 'logs')
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, 'vpnkeeper.log')

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[
            logging.FileHandler(log_file, encoding='utf-8'),
            logging.StreamHandler(),
        ],
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog='vpnkeeper', description=AppBranding.banner())
    ap.add_argument('--settings', help="Path to settings.json")
    ap.add_argument('--verbose', action='store_true', help="Enable debug logging")

    sub = ap.add_subparsers(dest='command')
    sub.add_parser('run', help="Update, assert account and ensure connection")
    sub.add_parser('check-version', help="Install a client update if one is available")
    sub.add_parser('assert-account', help="Set the account token if none is configured")
    sub.add_parser('status', help="Report the current tunnel status once")
    sub.add_parser('ensure-connected', help="Poll and remediate until connected")
    seal = sub.add_parser('seal-token', help="Encrypt a plaintext token into the account file")
    seal.add_argument('--input', required=True, help="File holding the plaintext token")
    return ap


def seal_token(settings: SupervisorSettings, input_path: str) -> int:
    logger = logging.getLogger(__name__)
    passphrase = os.environ.get(settings.token_passphrase_env)
    if not passphrase:
        logger.error("Set %s to seal the account token", settings.token_passphrase_env)
        return EXIT_FAILED
    try:
        with open(input_path, 'r', encoding='utf-8') as f:
            token = f.read().strip()
    except OSError as e:
        logger.error("Cannot read token file: %s", e)
        return EXIT_FAILED
    if not token:
        logger.error("Token file %s is empty", input_path)
        return EXIT_FAILED
    try:
        EncryptedTokenStore(settings.account_file, passphrase).write(token)
    except OSError as e:
        logger.error("Cannot write account file %s: %s", settings.account_file, e)
        return EXIT_FAILED
    return EXIT_OK


def dispatch(keeper: VpnKeeper, command: str) -> bool:
    if command == 'check-version':
        return keeper.check_version()
    if command == 'assert-account':
        return keeper.assert_account()
    if command == 'ensure-connected':
        return keeper.get_status(required=True)
    if command == 'status':
        connected = keeper.get_status(required=False)
        print(f"connected: {connected}")
        print(f"daemon running: {keeper.daemon.daemon_running()}")
        print(f"tunnel interface: {TunnelDetector.get_tunnel_interface() or '-'}")
        return connected
    return keeper.run().connected


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    command = args.command or 'run'

    settings = SupervisorSettings.load(args.settings)
    settings.ensure_dirs()

    setup_logging(settings.data_dir, args.verbose)
    logger = logging.getLogger(__name__)
    logger.info("%s starting: %s", AppBranding.banner(), command)

    if command == 'seal-token':
        return seal_token(settings, args.input)

    keeper = VpnKeeper(settings)
    signal.signal(signal.SIGINT, lambda _sig, _frame: keeper.cancel())

    ok = dispatch(keeper, command)
    if keeper.pacer.cancelled:
        logger.info("Interrupted")
        return EXIT_INTERRUPTED
    return EXIT_OK if ok else EXIT_FAILED


if __name__ == '__main__':
    sys.exit(main())
