"""Shared exceptions and run logging."""
