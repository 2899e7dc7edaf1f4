"""Account token storage.

Two stores share one contract: ``token()`` is a context manager that yields
the token (or None when unavailable) and drops the reference on exit.

  PlaintextTokenStore — token as a plain text file
  EncryptedTokenStore — AES-256-GCM file keyed from a passphrase (PBKDF2)
"""

import logging
import os
from contextlib import contextmanager
from typing import Iterator

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

logger = logging.getLogger(__name__)

SALT_SIZE = 16
NONCE_SIZE = 12
KEY_SIZE = 32
KDF_ITERATIONS = 200_000


class SecretStore:
    """Base token store."""

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> str | None:
        raise NotImplementedError

    @contextmanager
    def token(self) -> Iterator[str | None]:
        token = self._load()
        try:
            yield token
        finally:
            del token


class PlaintextTokenStore(SecretStore):
    """Reads the token verbatim from a text file."""

    def _load(self) -> str | None:
        if not os.path.isfile(self.path):
            logger.info("No account file at %s", self.path)
            return None
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return f.read().strip() or None
        except OSError as e:
            logger.warning("Failed to read account file: %s", e)
            return None


def derive_key(passphrase: str, salt: bytes) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=salt,
        iterations=KDF_ITERATIONS,
    )
    return kdf.derive(passphrase.encode('utf-8'))


class EncryptedTokenStore(SecretStore):
    """Token encrypted at rest: ``salt | nonce | AES-GCM ciphertext``."""

    def __init__(self, path: str, passphrase: str | None):
        super().__init__(path)
        self._passphrase = passphrase

    def _load(self) -> str | None:
        if not self._passphrase:
            logger.warning("No passphrase available for encrypted account file")
            return None
        if not os.path.isfile(self.path):
            logger.info("No account file at %s", self.path)
            return None
        try:
            with open(self.path, 'rb') as f:
                blob = f.read()
        except OSError as e:
            logger.warning("Failed to read account file: %s", e)
            return None

        if len(blob) <= SALT_SIZE + NONCE_SIZE:
            logger.warning("Encrypted account file is truncated")
            return None

        salt = blob[:SALT_SIZE]
        nonce = blob[SALT_SIZE:SALT_SIZE + NONCE_SIZE]
        ciphertext = blob[SALT_SIZE + NONCE_SIZE:]
        try:
            plain = AESGCM(derive_key(self._passphrase, salt)).decrypt(nonce, ciphertext, None)
        except InvalidTag:
            logger.warning("Account file could not be decrypted (wrong passphrase?)")
            return None
        return plain.decode('utf-8').strip() or None

    def write(self, token: str):
        """Encrypt ``token`` into the store's file, replacing any previous one."""
        if not self._passphrase:
            raise ValueError("A passphrase is required to seal the account token")
        salt = os.urandom(SALT_SIZE)
        nonce = os.urandom(NONCE_SIZE)
        ciphertext = AESGCM(derive_key(self._passphrase, salt)).encrypt(
            nonce, token.strip().encode('utf-8'), None)
        os.makedirs(os.path.dirname(self.path) or '.', exist_ok=True)
        with open(self.path, 'wb') as f:
            f.write(salt + nonce + ciphertext)
        logger.info("Sealed account token into %s", self.path)


def store_from_settings(settings) -> SecretStore:
    """Build the token store selected by ``settings.token_store``."""
    if settings.token_store == 'encrypted':
        return EncryptedTokenStore(settings.account_file,
                                   os.environ.get(settings.token_passphrase_env))
    if settings.token_store != 'plaintext':
        logger.warning("Unknown token store %r, using plaintext", settings.token_store)
    return PlaintextTokenStore(settings.account_file)
