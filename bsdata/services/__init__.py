"""Services - configuration and end-to-end catalogue retrieval."""

from __future__ import annotations

from .config_models import BsdataSettings
from .retrieval import CatalogueRetriever, get_data

__all__ = ["BsdataSettings", "CatalogueRetriever", "get_data"]
