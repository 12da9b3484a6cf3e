"""Pet store backend: Flask + SQLAlchemy, ports and adapters."""

__version__ = "1.0.0"
