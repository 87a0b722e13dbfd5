"""Adapters for external collaborators: git repositories and catalogue files."""
