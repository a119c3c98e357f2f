"""Passphrase-based AES-256-CBC encryption of text blobs.

Ciphertexts carry no MAC: a wrong passphrase and tampered data are
reported the same way, and tampering that leaves valid padding goes
unnoticed.
"""

from __future__ import annotations

import hashlib
import logging
import os

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from pagevault.errors import CryptoError, CryptoErrorKind
from pagevault.models import EncryptedBlob

logger = logging.getLogger(__name__)

NONCE_LENGTH = 16
BLOCK_BITS = algorithms.AES.block_size  # 128

DECRYPT_FAILED = "Decryption failed. Invalid key or corrupted data."


def derive_key(passphrase: str) -> bytes:
    """SHA-256 of the passphrase: a 32-byte AES-256 key."""
    return hashlib.sha256(str(passphrase).encode("utf-8")).digest()


def encrypt(plaintext: str, passphrase: str) -> str:
    """Encrypt under a fresh random nonce; returns ``hex(nonce):hex(ciphertext)``."""
    nonce = os.urandom(NONCE_LENGTH)
    padder = padding.PKCS7(BLOCK_BITS).padder()
    padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

    encryptor = Cipher(algorithms.AES(derive_key(passphrase)), modes.CBC(nonce)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return EncryptedBlob(nonce=nonce, ciphertext=ciphertext).serialize()


def _parse(text: str) -> EncryptedBlob:
    try:
        blob = EncryptedBlob.parse(text)
    except ValueError as exc:
        raise CryptoError(CryptoErrorKind.MALFORMED_INPUT, DECRYPT_FAILED) from exc

    if len(blob.nonce) != NONCE_LENGTH:
        raise CryptoError(CryptoErrorKind.MALFORMED_INPUT, DECRYPT_FAILED)
    block_bytes = BLOCK_BITS // 8
    if not blob.ciphertext or len(blob.ciphertext) % block_bytes:
        raise CryptoError(CryptoErrorKind.MALFORMED_INPUT, DECRYPT_FAILED)
    return blob


def decrypt(text: str, passphrase: str) -> str:
    """Reverse :func:`encrypt`.

    Raises CryptoError(MALFORMED_INPUT) when the blob cannot be parsed and
    CryptoError(WRONG_KEY_OR_CORRUPT) when the padding or UTF-8 check fails.
    """
    blob = _parse(text)
    decryptor = Cipher(
        algorithms.AES(derive_key(passphrase)), modes.CBC(blob.nonce),
    ).decryptor()
    padded = decryptor.update(blob.ciphertext) + decryptor.finalize()

    try:
        unpadder = padding.PKCS7(BLOCK_BITS).unpadder()
        data = unpadder.update(padded) + unpadder.finalize()
        return data.decode("utf-8")
    except ValueError as exc:
        # UnicodeDecodeError is a ValueError too
        logger.debug("Decryption rejected: %s", exc)
        raise CryptoError(CryptoErrorKind.WRONG_KEY_OR_CORRUPT, DECRYPT_FAILED) from exc
