from __future__ import annotations

import base64
import os
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Optional, Union

from cryptography.exceptions import InvalidKey, InvalidTag
from cryptography.hazmat.primitives import hashes, hmac, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from aegisprobe.core.errors import CryptoOperationFailed

PBKDF2_ITERATIONS = 390000
KEY_LENGTH = 32

HASH_ALGORITHMS: Dict[str, Callable[[], hashes.HashAlgorithm]] = {
    "sha256": hashes.SHA256,
    "sha512": hashes.SHA512,
    "blake2b512": lambda: hashes.BLAKE2b(64),
    "sha1": hashes.SHA1,
    "md5": hashes.MD5,
}

SYMMETRIC_ALGORITHMS = ("aes-256-gcm", "aes-256-cbc", "chacha20-poly1305")

Data = Union[str, bytes]


@dataclass(frozen=True)
class EncryptionResult:
    encrypted: str
    iv: str
    key: str
    auth_tag: Optional[str]
    algorithm: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _as_bytes(data: Data) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else data


def _hash_algorithm(name: str) -> hashes.HashAlgorithm:
    factory = HASH_ALGORITHMS.get(name.lower())
    if factory is None:
        raise CryptoOperationFailed(f"Unsupported hash algorithm: {name}")
    return factory()


def hash_data(data: Data, algorithm: str = "sha256", salt: Optional[Data] = None) -> str:
    digest = hashes.Hash(_hash_algorithm(algorithm))
    if salt:
        digest.update(_as_bytes(salt))
    digest.update(_as_bytes(data))
    return digest.finalize().hex()


def hmac_digest(data: Data, key: Data, algorithm: str = "sha256") -> str:
    mac = hmac.HMAC(_as_bytes(key), _hash_algorithm(algorithm))
    mac.update(_as_bytes(data))
    return mac.finalize().hex()


def _kdf(salt: bytes) -> PBKDF2HMAC:
    return PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )


def derive_key(password: str, salt: bytes) -> bytes:
    return _kdf(salt).derive(password.encode("utf-8"))


@dataclass(frozen=True)
class PasswordHash:
    hash: str
    salt: str


def hash_password(password: str) -> PasswordHash:
    """PBKDF2-SHA256 digest with a fresh 16-byte salt, both hex encoded."""
    salt = os.urandom(16)
    return PasswordHash(hash=derive_key(password, salt).hex(), salt=salt.hex())


def verify_password(password: str, password_hash: str, salt: str) -> bool:
    try:
        _kdf(bytes.fromhex(salt)).verify(password.encode("utf-8"), bytes.fromhex(password_hash))
    except InvalidKey:
        return False
    except ValueError as exc:
        raise CryptoOperationFailed(f"Malformed password hash: {exc}") from exc
    return True


def generate_key(length: int = KEY_LENGTH) -> str:
    return base64.b64encode(os.urandom(length)).decode("ascii")


def generate_iv(length: int = 16) -> str:
    return base64.b64encode(os.urandom(length)).decode("ascii")


def generate_secure_token(length: int = 32) -> str:
    return os.urandom(length).hex()


def encrypt_symmetric(data: Data, algorithm: str = "aes-256-gcm", key: Optional[bytes] = None) -> EncryptionResult:
    if algorithm not in SYMMETRIC_ALGORITHMS:
        raise CryptoOperationFailed(f"Unsupported algorithm: {algorithm}")
    key = key or os.urandom(KEY_LENGTH)
    if len(key) != KEY_LENGTH:
        raise CryptoOperationFailed(f"{algorithm} requires a {KEY_LENGTH}-byte key")
    plaintext = _as_bytes(data)
    auth_tag: Optional[bytes] = None
    if algorithm == "aes-256-cbc":
        iv = os.urandom(16)
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext) + padder.finalize()
        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
    else:
        # AEAD ciphers take a 96-bit nonce and append a 16-byte tag
        iv = os.urandom(12)
        aead = AESGCM(key) if algorithm == "aes-256-gcm" else ChaCha20Poly1305(key)
        sealed = aead.encrypt(iv, plaintext, None)
        ciphertext, auth_tag = sealed[:-16], sealed[-16:]
    return EncryptionResult(
        encrypted=base64.b64encode(ciphertext).decode("ascii"),
        iv=base64.b64encode(iv).decode("ascii"),
        key=base64.b64encode(key).decode("ascii"),
        auth_tag=base64.b64encode(auth_tag).decode("ascii") if auth_tag is not None else None,
        algorithm=algorithm,
    )


def decrypt_symmetric(
    encrypted: str,
    key: str,
    iv: str,
    algorithm: str = "aes-256-gcm",
    auth_tag: Optional[str] = None,
) -> str:
    if algorithm not in SYMMETRIC_ALGORITHMS:
        raise CryptoOperationFailed(f"Unsupported algorithm: {algorithm}")
    try:
        ciphertext = base64.b64decode(encrypted)
        raw_key = base64.b64decode(key)
        raw_iv = base64.b64decode(iv)
        if algorithm == "aes-256-cbc":
            decryptor = Cipher(algorithms.AES(raw_key), modes.CBC(raw_iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
        else:
            if auth_tag is None:
                raise CryptoOperationFailed(f"{algorithm} requires an authentication tag")
            aead = AESGCM(raw_key) if algorithm == "aes-256-gcm" else ChaCha20Poly1305(raw_key)
            plaintext = aead.decrypt(raw_iv, ciphertext + base64.b64decode(auth_tag), None)
        return plaintext.decode("utf-8")
    except CryptoOperationFailed:
        raise
    except (InvalidTag, ValueError) as exc:
        raise CryptoOperationFailed(f"Decryption failed: {str(exc) or type(exc).__name__}") from exc
