from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    PROJECT_NAME: str = "TrialGuard License Server"

    # Hex-encoded 32-byte Ed25519 seed. A throwaway key is generated when unset.
    SIGNING_KEY: str | None = None
    TRIAL_DURATION_DAYS: int = 14

    # Revocation store: in-memory when unset, SQLModel otherwise
    DATABASE_URL: str | None = None

    # Argon2 hash of the admin key guarding revoke/unrevoke. Open when unset.
    ADMIN_KEY_HASH: str | None = None

    LOG_LEVEL: str = "info"
    HOST: str = "127.0.0.1"
    PORT: int = 8081

    model_config = SettingsConfigDict(env_file=".env")

settings = Settings()
