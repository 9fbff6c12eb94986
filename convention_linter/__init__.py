"""AI-assisted naming-convention linter for ORM models and database migrations."""

__version__ = "0.1.0"
