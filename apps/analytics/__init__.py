"""Dashboards and reports for shops, businesses and the platform."""
