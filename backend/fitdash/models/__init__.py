"""
Database Models

Only the declarative Base lives here. Feature models are defined in
features/*/models.py; import them (see db.session.init_db) before using
Base.metadata.
"""

from fitdash.models.base import Base

__all__ = ["Base"]
