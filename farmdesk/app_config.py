# farmdesk/app_config.py

import os

from dotenv import load_dotenv

load_dotenv()


def load_config(app, overrides=None):
    """
    Load all Flask configuration in a clean centralized way.
    `overrides` wins over the environment (tests pass one in).
    """
    # ------------------------------
    # Marketplace API
    # ------------------------------
    app.config["FARM_API_BASE_URL"] = (
        os.getenv("FARM_API_BASE_URL", "http://localhost:5000/api") or ""
    ).rstrip("/")
    app.config["FARM_API_TIMEOUT"] = float(os.getenv("FARM_API_TIMEOUT", "15"))
    app.config["FARM_API_MAX_RETRIES"] = int(os.getenv("FARM_API_MAX_RETRIES", "2"))
    app.config["FARM_HEALTH_TIMEOUT"] = float(os.getenv("FARM_HEALTH_TIMEOUT", "5"))

    # ------------------------------
    # Web
    # ------------------------------
    app.config["CORS_ORIGINS"] = os.getenv("CORS_ORIGINS", "*")
    app.config["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO")

    # ------------------------------
    # Security Keys
    # ------------------------------
    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY") or os.urandom(24)

    if overrides:
        app.config.update(overrides)
