"""bsdata - retrieve and decode BSData army list catalogues.

Usage:
    from bsdata import get_data

    catalogues = get_data("star-wars-legion", "1.7.0")
    for catalogue in catalogues:
        print(catalogue.name, len(catalogue.shared_selection_entries))
"""

from __future__ import annotations

from bsdata.adapters.catalogue import Catalogue, CatalogueLoader, decode_catalogue
from bsdata.common.exceptions import (
    DecodeError,
    FetchError,
    FetchStep,
    RetrievalError,
    WorkspaceError,
)
from bsdata.services import BsdataSettings, CatalogueRetriever, get_data

__all__ = [
    "get_data",
    "CatalogueRetriever",
    "BsdataSettings",
    "Catalogue",
    "CatalogueLoader",
    "decode_catalogue",
    "RetrievalError",
    "WorkspaceError",
    "FetchError",
    "FetchStep",
    "DecodeError",
]

__version__ = "1.0.0"
