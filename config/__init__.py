"""Shared configuration package for microservices."""

from .shared_settings import SharedSettings, shared_settings

__all__ = ["SharedSettings", "shared_settings"]

