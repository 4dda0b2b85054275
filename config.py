import os
import logging


# Absolute path to project root
# (a stable anchor for all file paths)
basedir = os.path.abspath(os.path.dirname(__file__))

# Runtime only directory (DB)
instance_dir = os.path.join(basedir, "instance")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", "sqlite:///" + os.path.join(instance_dir, "app.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Canonical course catalog (CSV / xlsx / JSON course lists).
    CATALOG_DIR = os.path.join(basedir, "data_catalog")

    # Degree requirement areas, tracks and the fixed first semester.
    REQUIREMENTS_PATH = os.path.join(CATALOG_DIR, "degrees", "cs.json")

    # Extra prerequisite overrides (code,prerequisites), merged over the built-in table.
    # Keeping corrections in a file so catalogs can be patched without code edits.
    PREREQ_OVERRIDES_PATH = os.path.join(CATALOG_DIR, "overrides", "prereq_overrides.csv")

    # Generator defaults (request options win)
    MAX_SEMESTERS = 12
    COURSES_PER_REGULAR_SEMESTER = 3
    COURSES_PER_SUMMER_SEMESTER = 3


def log_level(name: str) -> int:
    return getattr(logging, str(name).upper(), logging.INFO)
