import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./contract_fields.db")
MINIO_ENDPOINT = os.getenv("MINIO_ENDPOINT", "minio:9000")
MINIO_ACCESS_KEY = os.getenv("MINIO_ACCESS_KEY", "minioadmin")
MINIO_SECRET_KEY = os.getenv("MINIO_SECRET_KEY", "minioadmin")
MINIO_BUCKET = os.getenv("MINIO_BUCKET", "contracts")
SECRET_KEY = os.getenv("SECRET_KEY", "devsecret")
ADMIN_ACCESS_TOKEN = os.getenv("ADMIN_ACCESS_TOKEN", "admin-test-token")
SIGNING_BASE_URL = os.getenv("SIGNING_BASE_URL", "http://localhost:3000/sign")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
