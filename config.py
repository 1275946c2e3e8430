import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./onboarding.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Session credentials (tenant binding is fixed at issuance)
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    ACCESS_TOKEN_TTL_MINUTES = data.get("ACCESS_TOKEN_TTL_MINUTES", 15)
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")

    # Invitation tokens
    TOKEN_ISSUER = data.get("TOKEN_ISSUER", "flows-invitations")
    TOKEN_SIGNING_KEYS = data.get(
        "TOKEN_SIGNING_KEYS", {"k1": "dev-invitation-signing-key-change-me"}
    )
    TOKEN_ACTIVE_KEY_ID = data.get("TOKEN_ACTIVE_KEY_ID", "k1")
    IDENTITY_ENCRYPTION_KEY = data.get(
        "IDENTITY_ENCRYPTION_KEY", "dev-identity-encryption-key-change-me"
    )
    INVITATION_TTL_DAYS = data.get("INVITATION_TTL_DAYS", 14)

    # Delivery
    MAX_DELIVERY_ATTEMPTS = data.get("MAX_DELIVERY_ATTEMPTS", 3)
    INVITATION_ACCEPT_URL = data.get(
        "INVITATION_ACCEPT_URL", "http://localhost:3000/invitations/accept"
    )

    # Credits
    CREDIT_BASE_PRICE = str(data.get("CREDIT_BASE_PRICE", "150.00"))
    CREDIT_CURRENCY = data.get("CREDIT_CURRENCY", "EUR")
    CREDIT_LOW_BALANCE_THRESHOLD = data.get("CREDIT_LOW_BALANCE_THRESHOLD", 10)
    CREDIT_CRITICAL_BALANCE_THRESHOLD = data.get("CREDIT_CRITICAL_BALANCE_THRESHOLD", 5)

    # Retention
    RETENTION_SWEEP_ENABLED = bool(data.get("RETENTION_SWEEP_ENABLED", False))
    RETENTION_SWEEP_INTERVAL_SECONDS = data.get("RETENTION_SWEEP_INTERVAL_SECONDS", 3600)
