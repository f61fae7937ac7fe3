"""Application settings."""

import os


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() == "true"


class Settings:
    ENV: str
    DATABASE_URL: str
    DB_SERVER: str
    DB_NAME: str
    DB_USER: str
    DB_PASSWORD: str
    DB_INIT_RETRY_SECONDS: float
    SEED_DATA: bool
    ALLOW_DEV_CORS: bool
    K8S_API_URL: str
    K8S_SERVICE_ACCOUNT_DIR: str
    K8S_API_TIMEOUT_SECONDS: float
    K8S_INSECURE_SKIP_TLS_VERIFY: bool

    def __init__(self):
        self.ENV = os.getenv("ENV") or "Unknown"
        self.DATABASE_URL = os.getenv("DATABASE_URL", "")
        self.DB_SERVER = os.getenv("DB_SERVER", "")
        self.DB_NAME = os.getenv("DB_NAME", "")
        self.DB_USER = os.getenv("DB_USER", "")
        self.DB_PASSWORD = os.getenv("DB_PASSWORD", "")
        self.DB_INIT_RETRY_SECONDS = float(os.getenv("DB_INIT_RETRY_SECONDS", "10"))
        self.SEED_DATA = _flag("SEED_DATA", "true")
        self.ALLOW_DEV_CORS = _flag("ALLOW_DEV_CORS", "true")
        self.K8S_API_URL = os.getenv("K8S_API_URL", "https://kubernetes.default.svc").rstrip("/")
        self.K8S_SERVICE_ACCOUNT_DIR = os.getenv("K8S_SERVICE_ACCOUNT_DIR", "/var/run/secrets/kubernetes.io/serviceaccount")
        self.K8S_API_TIMEOUT_SECONDS = float(os.getenv("K8S_API_TIMEOUT_SECONDS", "5"))
        # opt-in only; the mounted CA bundle is used otherwise
        self.K8S_INSECURE_SKIP_TLS_VERIFY = _flag("K8S_INSECURE_SKIP_TLS_VERIFY", "false")


settings = Settings()
