"""
Encryption of site test client credentials.

Credentials are encrypted with AES-256-GCM. The key is the SHA-256 digest of
the process-wide credentials passphrase, and each stored value is the
URL-safe base64 encoding of the 12-byte nonce followed by the ciphertext.
"""

import base64
import binascii
import hashlib
import secrets
from typing import Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..domain import TestClientCredentials
from .exceptions import CredentialsError

NONCE_SIZE = 12


def _key(passphrase: str) -> bytes:
    if not passphrase:
        raise CredentialsError('no credentials passphrase provided')
    return hashlib.sha256(passphrase.encode('utf-8')).digest()


def encrypt(value: str, passphrase: str) -> str:
    """Encrypt ``value`` using ``passphrase``."""
    nonce = secrets.token_bytes(NONCE_SIZE)
    ciphertext = AESGCM(_key(passphrase)).encrypt(
        nonce, value.encode('utf-8'), None
    )
    return base64.urlsafe_b64encode(nonce + ciphertext).decode('ascii')


def decrypt(value: str, passphrase: str) -> str:
    """
    Decrypt a value produced by :func:`encrypt`.

    Raises
    ------
    :class:`.CredentialsError`
        If the value is malformed, or was not encrypted with ``passphrase``.

    """
    key = _key(passphrase)
    try:
        blob = base64.urlsafe_b64decode(value.encode('ascii'))
    except (binascii.Error, UnicodeEncodeError) as e:
        raise CredentialsError('credentials are not properly encoded') from e
    if len(blob) <= NONCE_SIZE:
        raise CredentialsError('credentials are too short')
    try:
        plaintext = AESGCM(key).decrypt(blob[:NONCE_SIZE], blob[NONCE_SIZE:],
                                        None)
    except InvalidTag as e:
        raise CredentialsError('unable to decrypt the credentials') from e
    try:
        return plaintext.decode('utf-8')
    except UnicodeDecodeError as e:
        raise CredentialsError('credentials are not valid text') from e


def get_credentials(credentials: TestClientCredentials,
                    passphrase: str) -> Tuple[str, str]:
    """
    Get the decrypted client ID and secret.

    Returns
    -------
    str
        The client ID.
    str
        The client secret.

    Raises
    ------
    :class:`.CredentialsError`

    """
    return (decrypt(credentials.id, passphrase),
            decrypt(credentials.secret, passphrase))


def set_credentials(credentials: TestClientCredentials, client_id: str,
                    secret: str, passphrase: str) -> None:
    """Store ``client_id`` and ``secret`` encrypted in ``credentials``."""
    credentials.id = encrypt(client_id, passphrase)
    credentials.secret = encrypt(secret, passphrase)
