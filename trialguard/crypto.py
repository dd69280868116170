"""
Ed25519 key handling, signing and signature verification.

Keys travel as raw bytes (32-byte seed / 32-byte public key) hex encoded,
signatures as 64 raw bytes (128 hex characters).
"""
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey

from .errors import FormatError, KeyConfigurationError

SIGNATURE_LENGTH = 64
PUBLIC_KEY_LENGTH = 32
PRIVATE_KEY_LENGTH = 32
KEY_FORMAT = "ed25519"


def generate_signing_key() -> Ed25519PrivateKey:
    return Ed25519PrivateKey.generate()


def load_signing_key(seed_hex: str) -> Ed25519PrivateKey:
    """
    Loads the authority's private key from its hex-encoded 32-byte seed.
    """
    try:
        seed = bytes.fromhex(seed_hex.strip())
    except ValueError:
        raise KeyConfigurationError("Signing key is not valid hex")
    if len(seed) != PRIVATE_KEY_LENGTH:
        raise KeyConfigurationError(f"Signing key must be {PRIVATE_KEY_LENGTH} bytes, got {len(seed)}")
    return Ed25519PrivateKey.from_private_bytes(seed)


def signing_key_to_hex(key: Ed25519PrivateKey) -> str:
    raw = key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return raw.hex()


def public_key_bytes(key: Ed25519PrivateKey) -> bytes:
    return key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def sign(key: Ed25519PrivateKey, message: bytes) -> bytes:
    return key.sign(message)


def decode_signature_hex(signature_hex: str) -> bytes:
    """Decodes a hex signature, tolerating surrounding whitespace."""
    try:
        signature = bytes.fromhex(signature_hex.strip())
    except ValueError as e:
        raise FormatError(f"Invalid signature hex: {e}")
    if len(signature) != SIGNATURE_LENGTH:
        raise FormatError(f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(signature)}")
    return signature


def decode_public_key_hex(public_key_hex: str) -> bytes:
    try:
        key = bytes.fromhex(public_key_hex.strip())
    except ValueError:
        raise KeyConfigurationError("Invalid public key: not valid hex")
    if len(key) != PUBLIC_KEY_LENGTH:
        raise KeyConfigurationError(f"Invalid public key: must be {PUBLIC_KEY_LENGTH} bytes, got {len(key)}")
    return key


def verify(message: bytes, signature: bytes, public_key: bytes) -> bool:
    """
    Checks a detached Ed25519 signature.

    Args:
        message: The exact bytes that were signed
        signature: 64-byte signature
        public_key: 32-byte raw Ed25519 public key

    Returns:
        bool: True if the signature is authentic, False on any mismatch

    Raises:
        FormatError: the signature has the wrong length
        KeyConfigurationError: the public key is not a usable Ed25519 key
    """
    if len(signature) != SIGNATURE_LENGTH:
        raise FormatError(f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(signature)}")
    if len(public_key) != PUBLIC_KEY_LENGTH:
        raise KeyConfigurationError(f"Invalid public key: must be {PUBLIC_KEY_LENGTH} bytes, got {len(public_key)}")

    try:
        verifying_key = Ed25519PublicKey.from_public_bytes(public_key)
    except ValueError as e:
        raise KeyConfigurationError(f"Invalid public key: {e}")

    try:
        verifying_key.verify(signature, message)
    except InvalidSignature:
        return False
    return True
