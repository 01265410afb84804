"""Shared FastAPI dependencies."""

from .context import get_catalog, get_db, get_forecast_config, get_settings_dependency, get_tenant_id

__all__ = ["get_catalog", "get_db", "get_forecast_config", "get_settings_dependency", "get_tenant_id"]
