import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./demo.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")
    COOKIE_SECURE = bool(data.get("COOKIE_SECURE", False))

    # Demo lifecycle
    MAX_CONCURRENT_TENANTS = int(data.get("MAX_CONCURRENT_TENANTS", 20))
    DEMO_DURATION_HOURS = int(data.get("DEMO_DURATION_HOURS", 24))
    MAX_DEMO_HOURS = int(data.get("MAX_DEMO_HOURS", 72))
    PORT_RANGE_START = int(data.get("PORT_RANGE_START", 4000))
    PORT_RANGE_SIZE = int(data.get("PORT_RANGE_SIZE", 1000))
    SITE_URL = data.get("SITE_URL", "http://localhost:8000")
    DEMO_BASE_DOMAIN = data.get("DEMO_BASE_DOMAIN", "demo.localhost")

    # Provisioning
    DEMO_BASE_PATH = data.get("DEMO_BASE_PATH", "/var/demos")
    DEMO_TEMPLATE_PATH = data.get("DEMO_TEMPLATE_PATH", "/var/demos/template")
    DEMO_USE_DOCKER = bool(data.get("DEMO_USE_DOCKER", False))
    DEMO_DOCKER_IMAGE = data.get("DEMO_DOCKER_IMAGE", "cms:demo")
    DEMO_DOCKER_NETWORK = data.get("DEMO_DOCKER_NETWORK", "cms-demos")
    DEMO_CONTAINER_MEMORY = data.get("DEMO_CONTAINER_MEMORY", "512m")
    DEMO_CONTAINER_CPUS = str(data.get("DEMO_CONTAINER_CPUS", "1"))
    POSTGRES_HOST = data.get("POSTGRES_HOST", "localhost")
    POSTGRES_PORT = int(data.get("POSTGRES_PORT", 5432))
    POSTGRES_USER = data.get("POSTGRES_USER", "postgres")
    POSTGRES_PASSWORD = data.get("POSTGRES_PASSWORD", "")
    PROVISION_COMMAND_TIMEOUT = float(data.get("PROVISION_COMMAND_TIMEOUT", 120))

    # Email
    EMAIL_BACKEND = data.get("EMAIL_BACKEND", "log")
    EMAIL_FROM = data.get("EMAIL_FROM", "CMS Demo <noreply@demo.localhost>")
    SALES_EMAIL = data.get("SALES_EMAIL", "")
    AWS_REGION = data.get("AWS_REGION", "us-east-1")
    AWS_ACCESS_KEY_ID = data.get("AWS_ACCESS_KEY_ID", "")
    AWS_SECRET_ACCESS_KEY = data.get("AWS_SECRET_ACCESS_KEY", "")
    DNS_TIMEOUT = float(data.get("DNS_TIMEOUT", 5))

    # Scheduler
    SCHEDULER_ENABLED = bool(data.get("SCHEDULER_ENABLED", False))
    EXPIRATION_SWEEP_INTERVAL = int(data.get("EXPIRATION_SWEEP_INTERVAL", 3600))
    EXPIRATION_WARNING_INTERVAL = int(data.get("EXPIRATION_WARNING_INTERVAL", 1800))
    VERIFICATION_CLEANUP_INTERVAL = int(data.get("VERIFICATION_CLEANUP_INTERVAL", 3600))
    FOLLOW_UP_INTERVAL = int(data.get("FOLLOW_UP_INTERVAL", 900))
