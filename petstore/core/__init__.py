# Core package initialization
# Shared kernel: error taxonomy, configuration, logging and HTTP helpers

from . import config, exceptions

__all__ = [
    "config",
    "exceptions",
]
