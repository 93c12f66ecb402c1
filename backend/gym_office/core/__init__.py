# Core package initialization
# Cross-cutting concerns: configuration, logging, security, errors

from . import config, exceptions, security

__all__ = [
    "config",
    "exceptions",
    "security",
]
