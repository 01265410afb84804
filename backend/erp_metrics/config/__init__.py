"""Configuration package for the ERP metrics service."""

from .settings import AppSettings, get_settings

__all__ = ["AppSettings", "get_settings"]
