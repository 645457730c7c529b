import os
from dotenv import load_dotenv

# Reads .env from the working directory when present
load_dotenv()


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value not in (None, "") else default


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value not in (None, "") else default


class Settings:
    # OpenAI
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o")
    OPENAI_TEMPERATURE: float = _float_env("OPENAI_TEMPERATURE", 0.5)
    OPENAI_MAX_TOKENS: int = _int_env("OPENAI_MAX_TOKENS", 4000)
    OPENAI_MAX_RETRIES: int = _int_env("OPENAI_MAX_RETRIES", 3)

    # App
    APP_VERSION: str = os.getenv("APP_VERSION", "1.0.0")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Report store: "firestore" or "memory"
    REPORT_STORE_BACKEND: str = os.getenv("REPORT_STORE_BACKEND", "firestore")
    ANALYSES_COLLECTION: str = os.getenv("ANALYSES_COLLECTION", "career_analyses")

    # Saved-analyses cache file; unset keeps the cache in memory only
    SAVED_ANALYSES_PATH: str | None = os.getenv("SAVED_ANALYSES_PATH") or None

    # Seed for the admin dashboard sample data
    SAMPLE_DATA_SEED: int = _int_env("SAMPLE_DATA_SEED", 42)

    # Firebase (service account fields)
    FB_ACCOUNT_TYPE: str | None = os.getenv("FB_ACCOUNT_TYPE")
    FB_PROJECT_ID: str | None = os.getenv("FB_PROJECT_ID")
    FB_PRIVATE_KEY_ID: str | None = os.getenv("FB_PRIVATE_KEY_ID")
    FB_PRIVATE_KEY: str | None = os.getenv("FB_PRIVATE_KEY")
    FB_CLIENT_EMAIL: str | None = os.getenv("FB_CLIENT_EMAIL")
    FB_CLIENT_ID: str | None = os.getenv("FB_CLIENT_ID")
    FB_AUTH_URI: str | None = os.getenv("FB_AUTH_URI")
    FB_TOKEN_URI: str | None = os.getenv("FB_TOKEN_URI")
    FB_AUTH_CERT_URL: str | None = os.getenv("FB_AUTH_CERT_URL")
    FB_CERT_URL: str | None = os.getenv("FB_CERT_URL")

settings = Settings()
