"""Shared helpers for the guest submission pipeline."""
