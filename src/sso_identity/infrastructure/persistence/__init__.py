"""Persistence implementations for sso_identity.

This package contains storage-specific implementations of the
repository interface defined in sso_identity.repositories.

Structure:
    persistence/
    ├── memory/         # In-process implementation (development, tests)
    └── sqlalchemy/     # SQLAlchemy/SQL database implementation
"""
