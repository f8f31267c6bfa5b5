"""
Application configuration settings.
"""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", "postgresql://localhost/jobly")
DB_POOL_CONFIG = {
    "min_size": int(os.getenv("DB_MIN_POOL_SIZE", "1")),
    "max_size": int(os.getenv("DB_MAX_POOL_SIZE", "10")),
}

# Redis cache configuration
REDIS_CONFIG = {
    "host": os.getenv("REDIS_HOST", "localhost"),
    "port": int(os.getenv("REDIS_PORT", "6379")),
    "max_connections": int(os.getenv("REDIS_MAX_CONNECTIONS", "10")),
    "socket_connect_timeout": 5,
}

# Auth configuration
SECRET_KEY = os.getenv("SECRET_KEY", "jobly-development-secret-key-change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

# Logging configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")  # INFO, DEBUG, WARNING, ERROR
VERBOSE = os.getenv("VERBOSE", "false").lower() == "true"

API_CONFIG = {
    "title": "Jobly",
    "version": "1.0.0",
    "host": os.getenv("API_HOST", "0.0.0.0"),
    "port": int(os.getenv("API_PORT", "8000")),
}
