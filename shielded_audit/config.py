from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "shielded-audit"

    # Auditor public key: file path or http(s) URL
    PUBLIC_KEY_LOCATION: str = "rlwe/rlwe_pk.json"

    # Share artifacts handed in by the key-share holders
    SHARE_LOCATIONS: List[str] = [
        "rlwe/rlwe_sk_shares/share_1.json",
        "rlwe/rlwe_sk_shares/share_2.json",
    ]

    # Retrieval
    REQUEST_TIMEOUT: float = 10.0
    RETRIEVAL_WORKERS: int = 4

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="AUDIT_",
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
