"""Shared models and error definitions."""
