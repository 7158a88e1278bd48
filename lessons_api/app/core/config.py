"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields, so the
application runs out of the box against a SQLite file next to the
project.  Override values via environment variables before importing
this module.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Lessons API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Path of the SQLite file backing the key/value storage medium.  A
    # relative path is resolved against the project root by ``core.db``.
    database_url: str = os.getenv("DATABASE_URL", "lessons.db")

    # ``sqlite`` persists tables to ``database_url``; ``memory`` keeps them
    # in a dict for the lifetime of the process.
    storage_backend: str = os.getenv("STORAGE_BACKEND", "sqlite")

    # Every table is stored under "<namespace>.<table>".
    storage_namespace: str = os.getenv("STORAGE_NAMESPACE", "lessonsuk")

    # Lesson pricing.  ``total = rate * hours * pupils``.
    currency: str = os.getenv("CURRENCY", "GBP")
    one_to_one_rate: float = float(os.getenv("ONE_TO_ONE_RATE", "30"))
    group_rate: float = float(os.getenv("GROUP_RATE", "20"))
    lesson_hours: float = float(os.getenv("LESSON_HOURS", "2"))
    max_group_pupils: int = int(os.getenv("MAX_GROUP_PUPILS", "5"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.
settings = Settings()
