"""
.env layering and CORS origin derivation for the check-in service.

Files are read most specific first; a variable already present in the
process environment is never replaced.
"""

import os
from typing import List, Optional
from dotenv import load_dotenv
import logging

logger = logging.getLogger(__name__)

# Ports the organizer dashboard and scanner app run on in development
DEV_FRONTEND_PORTS = (8080, 3000)


def env_files_for(environment: str) -> List[str]:
    return [f".env.{environment}", ".env.local", ".env"]


def load_env_files(environment: Optional[str] = None) -> List[str]:
    """Load every existing .env layer for the environment; return the ones read."""
    environment = environment or os.getenv("ENVIRONMENT", "development")
    loaded = [path for path in env_files_for(environment) if os.path.exists(path)]
    for path in loaded:
        load_dotenv(path, override=False)

    if loaded:
        logger.info(f"Loaded {environment} configuration from: {', '.join(loaded)}")
    else:
        logger.warning(f"No .env files for {environment}, using process environment only")
    return loaded


def cors_origins_for(frontend_url: str) -> List[str]:
    """The frontend origin, plus the local scanner/dashboard origins when developing locally."""
    origins = [frontend_url]
    if "localhost" in frontend_url or "127.0.0.1" in frontend_url:
        for port in DEV_FRONTEND_PORTS:
            origins.append(f"http://localhost:{port}")
            origins.append(f"http://127.0.0.1:{port}")
    return list(dict.fromkeys(origins))


LOADED_ENV_FILES = load_env_files()
