"""Data-access objects wrapping SQLAlchemy queries."""
