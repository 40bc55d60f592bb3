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
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./test.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    IDENTITY_SERVICE_URL = data.get("IDENTITY_SERVICE_URL", "http://localhost:9999")
    IDENTITY_SERVICE_API_KEY = data.get("IDENTITY_SERVICE_API_KEY", "")
    IDENTITY_SERVICE_TIMEOUT_SECONDS = float(data.get("IDENTITY_SERVICE_TIMEOUT_SECONDS", 10))
    TRANSACTION_TIMEOUT_SECONDS = float(data.get("TRANSACTION_TIMEOUT_SECONDS", 5))
    PROCESSING_LEASE_SECONDS = int(data.get("PROCESSING_LEASE_SECONDS", 300))
    ADMIN_ROSTER_CACHE_SECONDS = float(data.get("ADMIN_ROSTER_CACHE_SECONDS", 5))
    SETUP_LINK_TENANT_LIMIT = int(data.get("SETUP_LINK_TENANT_LIMIT", 3))
    SETUP_LINK_TENANT_WINDOW_MINUTES = int(data.get("SETUP_LINK_TENANT_WINDOW_MINUTES", 30))
    SETUP_LINK_ACTOR_LIMIT = int(data.get("SETUP_LINK_ACTOR_LIMIT", 5))
    SETUP_LINK_ACTOR_WINDOW_MINUTES = int(data.get("SETUP_LINK_ACTOR_WINDOW_MINUTES", 60))
