"""Guestflow core - domain, application interfaces, settings and infrastructure."""
