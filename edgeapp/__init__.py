"""Application-service template: event pipeline functions, validated custom configuration and service setup."""

__version__ = "0.1.0"
__all__ = ["app", "config", "sample"]