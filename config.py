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
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./identity.db")
    DB_POOL_SIZE = int(data.get("DB_POOL_SIZE", 20))
    DB_POOL_TIMEOUT = float(data.get("DB_POOL_TIMEOUT", 2))
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    ACCESS_TOKEN_EXPIRY = data.get("ACCESS_TOKEN_EXPIRY", "1m")
    REFRESH_TOKEN_EXPIRY = data.get("REFRESH_TOKEN_EXPIRY", "2m")
    ENCRYPTION_KEY = data.get("ENCRYPTION_KEY", "dev-encryption-key-change-in-production")
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")
