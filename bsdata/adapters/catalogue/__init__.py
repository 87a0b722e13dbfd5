"""Catalogue adapter - schema model, decoder and directory loader."""

from __future__ import annotations

from .decoder import decode_catalogue
from .loader import CATALOGUE_MARKER, CatalogueLoader, is_catalogue_file
from .models import (
    Catalogue,
    CatalogueNode,
    CategoryEntry,
    CategoryLink,
    Characteristic,
    CharacteristicType,
    Condition,
    ConditionGroup,
    Constraint,
    Cost,
    EntryLink,
    InfoLink,
    Modifier,
    ModifierGroup,
    Profile,
    ProfileType,
    Publication,
    Repeat,
    Rule,
    SelectionEntry,
    SelectionEntryGroup,
)

__all__ = [
    # Loader
    "CatalogueLoader",
    "CATALOGUE_MARKER",
    "is_catalogue_file",
    "decode_catalogue",
    # Models
    "Catalogue",
    "CatalogueNode",
    "CategoryEntry",
    "CategoryLink",
    "Characteristic",
    "CharacteristicType",
    "Condition",
    "ConditionGroup",
    "Constraint",
    "Cost",
    "EntryLink",
    "InfoLink",
    "Modifier",
    "ModifierGroup",
    "Profile",
    "ProfileType",
    "Publication",
    "Repeat",
    "Rule",
    "SelectionEntry",
    "SelectionEntryGroup",
]
