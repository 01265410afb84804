"""Inventory forecasting and seeding services."""
