# trial_cli/core/artifacts.py
from pathlib import Path
from typing import Tuple

from trialguard.crypto import decode_public_key_hex
from trialguard.errors import FormatError, KeyConfigurationError

from . import config


def token_path() -> Path:
    return config.APP_DIR / config.TOKEN_FILENAME


def signature_path() -> Path:
    return config.APP_DIR / config.SIGNATURE_FILENAME


def last_check_path() -> Path:
    return config.APP_DIR / config.LAST_CHECK_FILENAME


def save_grant(token_text: str, signature_hex: str) -> None:
    """
    Writes the token text and its hex signature next to each other.
    """
    config.APP_DIR.mkdir(parents=True, exist_ok=True)
    token_path().write_text(token_text, encoding="utf-8")
    signature_path().write_text(signature_hex, encoding="utf-8")


def load_grant() -> Tuple[str, str]:
    """
    Reads the stored token and signature, trimming surrounding whitespace.
    Raises FormatError if either artifact is missing.
    """
    token_text = _read_artifact(token_path())
    signature_hex = _read_artifact(signature_path())
    return token_text, signature_hex


def _read_artifact(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        raise FormatError(f"{path.name} file not found! Please obtain a trial license from the license server.")
    except UnicodeDecodeError:
        raise FormatError(f"{path.name} is not valid text")


def load_public_key() -> bytes:
    """
    Returns the configured authority public key.
    The environment variable wins over the key file.
    """
    if config.PUBLIC_KEY:
        return decode_public_key_hex(config.PUBLIC_KEY)
    if config.PUBLIC_KEY_FILE:
        try:
            return decode_public_key_hex(Path(config.PUBLIC_KEY_FILE).read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise KeyConfigurationError(f"Public key file not found: {config.PUBLIC_KEY_FILE}")
    raise KeyConfigurationError(
        "No public key configured. Set TRIALGUARD_PUBLIC_KEY or TRIALGUARD_PUBLIC_KEY_FILE."
    )
