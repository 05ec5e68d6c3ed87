"""
Feature modules for FitDash.

Each feature is a self-contained module with:
- models.py - SQLAlchemy models
- schemas.py - Pydantic schemas
- repository.py - Data access
- connection.py - Provider lifecycle (connect / sync / disconnect)
"""
