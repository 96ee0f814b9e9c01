import os
from dotenv import load_dotenv

load_dotenv()

# Support both SQLite (local) and PostgreSQL (production)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./pagefolio.db")
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

CORS_ORIGINS = [
    "http://localhost:4321",  # Astro dev server
    "http://localhost:3000",
]
cors_origins_env = os.getenv("CORS_ORIGINS", "")
if cors_origins_env:
    CORS_ORIGINS.extend([origin.strip() for origin in cors_origins_env.split(",") if origin.strip()])

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Upper bound on slug candidates tried before giving up (base, base-2, ... base-N)
SLUG_MAX_ATTEMPTS = int(os.getenv("SLUG_MAX_ATTEMPTS", "100"))
