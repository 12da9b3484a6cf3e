"""
Integration tests package.

Tests that run the SQLAlchemy adapters and the Flask app against SQLite.
"""
