import getpass
import os

from trialguard.crypto import generate_signing_key, public_key_bytes, signing_key_to_hex
from license_server.core.security import get_admin_key_hash


def generate_keys():
    print("Generating Ed25519 signing key...")
    signing_key = generate_signing_key()
    return signing_key_to_hex(signing_key), public_key_bytes(signing_key).hex()


def setup_env():
    if os.path.exists(".env"):
        response = input("A .env file already exists. Overwrite it? (y/N): ")
        if response.lower() != 'y':
            print("Aborted.")
            return

    signing_key, public_key = generate_keys()

    admin_key = getpass.getpass("Admin key for revoke/unrevoke (empty = no admin protection): ")
    admin_key_hash = get_admin_key_hash(admin_key) if admin_key else None

    lines = [
        f'SIGNING_KEY="{signing_key}"',
        "TRIAL_DURATION_DAYS=14",
        'DATABASE_URL="sqlite:///./trialguard.db"',
    ]
    if admin_key_hash:
        lines.append(f"ADMIN_KEY_HASH='{admin_key_hash}'")

    with open(".env", "w") as f:
        f.write("\n".join(lines))
        f.write("\n") # Ensure trailing newline

    print("SUCCESS: .env file created with a new signing key.")
    print("Provision this public key into every trial consumer (TRIALGUARD_PUBLIC_KEY):")
    print(f"   {public_key}")


if __name__ == "__main__":
    setup_env()
