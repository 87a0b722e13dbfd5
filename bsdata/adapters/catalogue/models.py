"""Catalogue schema models.

This module defines:
- One frozen dataclass per node type of a BattleScribe catalogue document
- ``from_element`` constructors that build a model from an ElementTree node

Conventions:
- Attribute and text values are kept as the raw strings of the document.
  An absent attribute is ``None``; a present but empty one is ``""``.
- Child collections are tuples in document order. Nothing is reordered,
  merged or deduplicated.
- ``targetId``/``childId`` values are plain strings. They are never resolved
  while decoding; ``Catalogue.find`` looks them up on demand.
- Elements are matched by local name, so namespaced and un-namespaced
  documents decode the same way. Unknown elements and attributes are ignored.

Reference: https://github.com/BSData/schemas
"""

from __future__ import annotations

import keyword
import re
import xml.etree.ElementTree as ET
from collections.abc import Iterable, Iterator
from dataclasses import asdict, dataclass, fields
from typing import Any, ClassVar, TypeVar

__all__ = [
    "CatalogueNode",
    "Publication",
    "CharacteristicType",
    "ProfileType",
    "CategoryEntry",
    "CategoryLink",
    "Characteristic",
    "Profile",
    "Cost",
    "Constraint",
    "Condition",
    "ConditionGroup",
    "Repeat",
    "Modifier",
    "ModifierGroup",
    "Rule",
    "InfoLink",
    "EntryLink",
    "SelectionEntry",
    "SelectionEntryGroup",
    "Catalogue",
]

N = TypeVar("N", bound="CatalogueNode")

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


# =============================================================================
# Element Helpers
# =============================================================================


def _local_name(tag: Any) -> str:
    """Strip the ``{namespace}`` prefix from an element tag."""
    if not isinstance(tag, str):
        return ""  # comments and processing instructions
    return tag.rsplit("}", 1)[-1]


def _field_name(attribute: str) -> str:
    """Map an XML attribute name to its dataclass field (``typeId`` -> ``type_id``)."""
    name = _CAMEL_BOUNDARY.sub("_", attribute).lower()
    return f"{name}_" if keyword.iskeyword(name) else name


def _attrs(elem: ET.Element, names: Iterable[str]) -> dict[str, str | None]:
    return {_field_name(name): elem.get(name) for name in names}


def _text(elem: ET.Element, name: str) -> str | None:
    """Text of the first ``name`` child; ``""`` if empty, ``None`` if absent."""
    for child in elem:
        if _local_name(child.tag) == name:
            return child.text or ""
    return None


def _collect(elem: ET.Element, container: str, node_type: type[N]) -> tuple[N, ...]:
    """Decode every ``node_type.TAG`` child of each ``container`` child of ``elem``."""
    return tuple(
        node_type.from_element(item)
        for wrapper in elem
        if _local_name(wrapper.tag) == container
        for item in wrapper
        if _local_name(item.tag) == node_type.TAG
    )


def _as_bool(value: str | None) -> bool | None:
    if value is None or not value.strip():
        return None
    return value.strip().lower() in ("true", "1")


def _as_float(value: str | None) -> float | None:
    """Parse a numeric attribute; ``None`` when unset or not a number."""
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError:
        return None


# =============================================================================
# Base Node
# =============================================================================


@dataclass(frozen=True)
class CatalogueNode:
    """Common behaviour of every decoded node.

    Subclasses declare their element name in ``TAG``, the XML attributes they
    carry in ``ATTRIBUTES``, and decode children or text in ``_decode_content``.
    """

    TAG: ClassVar[str] = ""
    ATTRIBUTES: ClassVar[tuple[str, ...]] = ()

    @classmethod
    def from_element(cls: type[N], elem: ET.Element) -> N:
        """Build a node from an ElementTree element."""
        return cls(**_attrs(elem, cls.ATTRIBUTES), **cls._decode_content(elem))

    @classmethod
    def _decode_content(cls, elem: ET.Element) -> dict[str, Any]:
        return {}

    def flag(self, name: str) -> bool | None:
        """Interpret a boolean attribute such as ``hidden``; ``None`` when unset."""
        return _as_bool(getattr(self, name))

    def iter_nodes(self) -> Iterator[CatalogueNode]:
        """Yield this node and all of its descendants in document order."""
        yield self
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, tuple):
                for item in value:
                    if isinstance(item, CatalogueNode):
                        yield from item.iter_nodes()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary recursively."""
        return asdict(self)


# =============================================================================
# Leaf Nodes
# =============================================================================


@dataclass(frozen=True)
class Publication(CatalogueNode):
    """A rulebook or other source referenced by entries and rules."""

    TAG: ClassVar[str] = "publication"
    ATTRIBUTES: ClassVar[tuple[str, ...]] = (
        "id",
        "name",
        "shortName",
        "publisher",
        "publicationDate",
        "publisherUrl",
    )

    id: str | None = None
    name: str | None = None
    short_name: str | None = None
    publisher: str | None = None
    publication_date: str | None = None
    publisher_url: str | None = None


@dataclass(frozen=True)
class CharacteristicType(CatalogueNode):
    TAG: ClassVar[str] = "characteristicType"
    ATTRIBUTES: ClassVar[tuple[str, ...]] = ("id", "name")

    id: str | None = None
    name: str | None = None


@dataclass(frozen=True)
class ProfileType(CatalogueNode):
    """A stat-block schema: the ordered characteristic columns of a profile."""

    TAG: ClassVar[str] = "profileType"
    ATTRIBUTES: ClassVar[tuple[str, ...]] = ("id", "name")

    id: str | None = None
    name: str | None = None
    characteristic_types: tuple[CharacteristicType, ...] = ()

    @classmethod
    def _decode_content(cls, elem: ET.Element) -> dict[str, Any]:
        return {
            "characteristic_types": _collect(
                elem, "characteristicTypes", CharacteristicType
            )
        }


@dataclass(frozen=True)
class CategoryEntry(CatalogueNode):
    """A grouping tag such as "Troops" or "Commander"."""

    TAG: ClassVar[str] = "categoryEntry"
    ATTRIBUTES: ClassVar[tuple[str, ...]] = ("id", "name", "hidden")

    id: str | None = None
    name: str | None = None
    hidden: str | None = None


@dataclass(frozen=True)
class CategoryLink(CatalogueNode):
    """Places an entry in a category, by category id."""

    TAG: ClassVar[str] = "categoryLink"
    ATTRIBUTES: ClassVar[tuple[str, ...]] = (
        "id",
        "name",
        "hidden",
        "targetId",
        "primary",
    )

    id: str | None = None
    name: str | None = None
    hidden: str | None = None
    target_id: str | None = None
    primary: str | None = None


@dataclass(frozen=True)
class Characteristic(CatalogueNode):
    """One value of a profile; the value is the element text."""

    TAG: ClassVar[str] = "characteristic"
    ATTRIBUTES: ClassVar[tuple[str, ...]] = ("name", "typeId")

    name: str | None = None
    type_id: str | None = None
    value: str | None = None

    @classmethod
    def _decode_content(cls, elem: ET.Element) -> dict[str, Any]:
        return {"value": elem.text or ""}


@dataclass(frozen=True)
class Profile(CatalogueNode):
    """A stat block instance typed by a ProfileType."""

    TAG: ClassVar[str] = "profile"
    ATTRIBUTES: ClassVar[tuple[str, ...]] = (
        "id",
        "name",
        "hidden",
        "typeId",
        "typeName",
        "publicationId",
        "page",
    )

    id: str | None = None
    name: str | None = None
    hidden: str | None = None
    type_id: str | None = None
    type_name: str | None = None
    publication_id: str | None = None
    page: str | None = None
    characteristics: tuple[Characteristic, ...] = ()

    @classmethod
    def _decode_content(cls, elem: ET.Element) -> dict[str, Any]:
        return {"characteristics": _collect(elem, "characteristics", Characteristic)}

    def characteristic(self, name: str) -> str | None:
        """Value of the first characteristic called ``name``."""
        for item in self.characteristics:
            if item.name == name:
                return item.value
        return None


@dataclass(frozen=True)
class Cost(CatalogueNode):
    """A named numeric cost axis, e.g. points."""

    TAG: ClassVar[str] = "cost"
    ATTRIBUTES: ClassVar[tuple[str, ...]] = ("name", "typeId", "value")

    name: str | None = None
    type_id: str | None = None
    value: str | None = None

    @property
    def amount(self) -> float | None:
        """Numeric value, or ``None`` when absent or not a number."""
        return _as_float(self.value)


@dataclass(frozen=True)
class Rule(CatalogueNode):
    """Special-rule text, usually shared and referenced through info links."""

    TAG: ClassVar[str] = "rule"
    ATTRIBUTES: ClassVar[tuple[str, ...]] = (
        "id",
        "name",
        "publicationId",
        "page",
        "hidden",
    )

    id: str | None = None
    name: str | None = None
    publication_id: str | None = None
    page: str | None = None
    hidden: str | None = None
    description: str | None = None

    @classmethod
    def _decode_content(cls, elem: ET.Element) -> dict[str, Any]:
        return {"description": _text(elem, "description")}


# =============================================================================
# Constraints, Conditions and Modifiers
# =============================================================================

_QUERY_ATTRIBUTES: tuple[str, ...] = (
    "field",
    "scope",
    "value",
    "percentValue",
    "shared",
    "includeChildSelections",
    "includeChildForces",
)


@dataclass(frozen=True)
class _QueryNode(CatalogueNode):
    """Attributes shared by constraints, conditions and repeats.

    Each of them counts ``field`` within ``scope`` and compares it to ``value``.
    """

    field: str | None = None
    scope: str | None = None
    value: str | None = None
    percent_value: str | None = None
    shared: str | None = None
    include_child_selections: str | None = None
    include_child_forces: str | None = None

    @property
    def amount(self) -> float | None:
        """Numeric value, or ``None`` when absent or not a number."""
        return _as_float(self.value)


@dataclass(frozen=True)
class Constraint(_QueryNode):
    """A minimum/maximum selection-count limit."""

    TAG: ClassVar[str] = "constraint"
    ATTRIBUTES: ClassVar[tuple[str, ...]] = _QUERY_ATTRIBUTES + ("id", "type")

    id: str | None = None
    type: str | None = None


@dataclass(frozen=True)
class Condition(_QueryNode):
    """A boolean test against the state of another entity (``child_id``)."""

    TAG: ClassVar[str] = "condition"
    ATTRIBUTES: ClassVar[tuple[str, ...]] = _QUERY_ATTRIBUTES + ("childId", "type")

    child_id: str | None = None
    type: str | None = None


@dataclass(frozen=True)
class Repeat(_QueryNode):
    """Applies a modifier once per ``value`` matches of the query."""

    TAG: ClassVar[str] = "repeat"
    ATTRIBUTES: ClassVar[tuple[str, ...]] = _QUERY_ATTRIBUTES + (
        "childId",
        "repeats",
        "roundUp",
    )

    child_id: str | None = None
    repeats: str | None = None
    round_up: str | None = None


@dataclass(frozen=True)
class ConditionGroup(CatalogueNode):
    """Combines conditions with ``and``/``or``; groups nest."""

    TAG: ClassVar[str] = "conditionGroup"
    ATTRIBUTES: ClassVar[tuple[str, ...]] = ("type",)

    type: str | None = None
    conditions: tuple[Condition, ...] = ()
    condition_groups: tuple[ConditionGroup, ...] = ()

    @classmethod
    def _decode_content(cls, elem: ET.Element) -> dict[str, Any]:
        return {
            "conditions": _collect(elem, "conditions", Condition),
            "condition_groups": _collect(elem, "conditionGroups", ConditionGroup),
        }


@dataclass(frozen=True)
class Modifier(CatalogueNode):
    """Alters ``field`` of the owning node when its conditions hold."""

    TAG: ClassVar[str] = "modifier"
    ATTRIBUTES: ClassVar[tuple[str, ...]] = ("type", "field", "value")

    type: str | None = None
    field: str | None = None
    value: str | None = None
    conditions: tuple[Condition, ...] = ()
    condition_groups: tuple[ConditionGroup, ...] = ()
    repeats: tuple[Repeat, ...] = ()

    @classmethod
    def _decode_content(cls, elem: ET.Element) -> dict[str, Any]:
        return {
            "conditions": _collect(elem, "conditions", Condition),
            "condition_groups": _collect(elem, "conditionGroups", ConditionGroup),
            "repeats": _collect(elem, "repeats", Repeat),
        }


@dataclass(frozen=True)
class ModifierGroup(CatalogueNode):
    """Modifiers sharing one set of conditions and repeats."""

    TAG: ClassVar[str] = "modifierGroup"

    conditions: tuple[Condition, ...] = ()
    condition_groups: tuple[ConditionGroup, ...] = ()
    repeats: tuple[Repeat, ...] = ()
    modifiers: tuple[Modifier, ...] = ()
    modifier_groups: tuple[ModifierGroup, ...] = ()

    @classmethod
    def _decode_content(cls, elem: ET.Element) -> dict[str, Any]:
        return {
            "conditions": _collect(elem, "conditions", Condition),
            "condition_groups": _collect(elem, "conditionGroups", ConditionGroup),
            "repeats": _collect(elem, "repeats", Repeat),
            "modifiers": _collect(elem, "modifiers", Modifier),
            "modifier_groups": _collect(elem, "modifierGroups", ModifierGroup),
        }


# =============================================================================
# Links
# =============================================================================


@dataclass(frozen=True)
class InfoLink(CatalogueNode):
    """Reference to a shared rule, profile or info group, by id."""

    TAG: ClassVar[str] = "infoLink"
    ATTRIBUTES: ClassVar[tuple[str, ...]] = (
        "id",
        "name",
        "hidden",
        "targetId",
        "type",
    )

    id: str | None = None
    name: str | None = None
    hidden: str | None = None
    target_id: str | None = None
    type: str | None = None
    modifiers: tuple[Modifier, ...] = ()
    modifier_groups: tuple[ModifierGroup, ...] = ()

    @classmethod
    def _decode_content(cls, elem: ET.Element) -> dict[str, Any]:
        return {
            "modifiers": _collect(elem, "modifiers", Modifier),
            "modifier_groups": _collect(elem, "modifierGroups", ModifierGroup),
        }


@dataclass(frozen=True)
class EntryLink(CatalogueNode):
    """Reference to a shared selection entry or group, by ``target_id``."""

    TAG: ClassVar[str] = "entryLink"
    ATTRIBUTES: ClassVar[tuple[str, ...]] = (
        "id",
        "name",
        "hidden",
        "collective",
        "import",
        "targetId",
        "type",
    )

    id: str | None = None
    name: str | None = None
    hidden: str | None = None
    collective: str | None = None
    import_: str | None = None
    target_id: str | None = None
    type: str | None = None
    modifiers: tuple[Modifier, ...] = ()
    modifier_groups: tuple[ModifierGroup, ...] = ()
    constraints: tuple[Constraint, ...] = ()
    category_links: tuple[CategoryLink, ...] = ()
    costs: tuple[Cost, ...] = ()

    @classmethod
    def _decode_content(cls, elem: ET.Element) -> dict[str, Any]:
        return {
            "modifiers": _collect(elem, "modifiers", Modifier),
            "modifier_groups": _collect(elem, "modifierGroups", ModifierGroup),
            "constraints": _collect(elem, "constraints", Constraint),
            "category_links": _collect(elem, "categoryLinks", CategoryLink),
            "costs": _collect(elem, "costs", Cost),
        }


# =============================================================================
# Selection Entries
# =============================================================================


@dataclass(frozen=True)
class SelectionEntry(CatalogueNode):
    """A selectable unit, model or upgrade.

    Entries nest: a unit holds its models, a model holds its wargear.
    """

    TAG: ClassVar[str] = "selectionEntry"
    ATTRIBUTES: ClassVar[tuple[str, ...]] = (
        "id",
        "name",
        "type",
        "hidden",
        "collective",
        "import",
        "publicationId",
        "page",
    )

    id: str | None = None
    name: str | None = None
    type: str | None = None
    hidden: str | None = None
    collective: str | None = None
    import_: str | None = None
    publication_id: str | None = None
    page: str | None = None
    profiles: tuple[Profile, ...] = ()
    rules: tuple[Rule, ...] = ()
    info_links: tuple[InfoLink, ...] = ()
    costs: tuple[Cost, ...] = ()
    category_links: tuple[CategoryLink, ...] = ()
    constraints: tuple[Constraint, ...] = ()
    modifiers: tuple[Modifier, ...] = ()
    modifier_groups: tuple[ModifierGroup, ...] = ()
    selection_entries: tuple[SelectionEntry, ...] = ()
    selection_entry_groups: tuple[SelectionEntryGroup, ...] = ()
    entry_links: tuple[EntryLink, ...] = ()

    @classmethod
    def _decode_content(cls, elem: ET.Element) -> dict[str, Any]:
        return {
            "profiles": _collect(elem, "profiles", Profile),
            "rules": _collect(elem, "rules", Rule),
            "info_links": _collect(elem, "infoLinks", InfoLink),
            "costs": _collect(elem, "costs", Cost),
            "category_links": _collect(elem, "categoryLinks", CategoryLink),
            "constraints": _collect(elem, "constraints", Constraint),
            "modifiers": _collect(elem, "modifiers", Modifier),
            "modifier_groups": _collect(elem, "modifierGroups", ModifierGroup),
            "selection_entries": _collect(elem, "selectionEntries", SelectionEntry),
            "selection_entry_groups": _collect(
                elem, "selectionEntryGroups", SelectionEntryGroup
            ),
            "entry_links": _collect(elem, "entryLinks", EntryLink),
        }

    def cost(self, name: str) -> float | None:
        """Amount of the first cost called ``name``."""
        for item in self.costs:
            if item.name == name:
                return item.amount
        return None


@dataclass(frozen=True)
class SelectionEntryGroup(CatalogueNode):
    """A constrained choice over entries, e.g. "pick one weapon"."""

    TAG: ClassVar[str] = "selectionEntryGroup"
    ATTRIBUTES: ClassVar[tuple[str, ...]] = (
        "id",
        "name",
        "hidden",
        "collective",
        "import",
        "publicationId",
        "page",
        "defaultSelectionEntryId",
    )

    id: str | None = None
    name: str | None = None
    hidden: str | None = None
    collective: str | None = None
    import_: str | None = None
    publication_id: str | None = None
    page: str | None = None
    default_selection_entry_id: str | None = None
    modifiers: tuple[Modifier, ...] = ()
    modifier_groups: tuple[ModifierGroup, ...] = ()
    constraints: tuple[Constraint, ...] = ()
    category_links: tuple[CategoryLink, ...] = ()
    selection_entries: tuple[SelectionEntry, ...] = ()
    selection_entry_groups: tuple[SelectionEntryGroup, ...] = ()
    entry_links: tuple[EntryLink, ...] = ()

    @classmethod
    def _decode_content(cls, elem: ET.Element) -> dict[str, Any]:
        return {
            "modifiers": _collect(elem, "modifiers", Modifier),
            "modifier_groups": _collect(elem, "modifierGroups", ModifierGroup),
            "constraints": _collect(elem, "constraints", Constraint),
            "category_links": _collect(elem, "categoryLinks", CategoryLink),
            "selection_entries": _collect(elem, "selectionEntries", SelectionEntry),
            "selection_entry_groups": _collect(
                elem, "selectionEntryGroups", SelectionEntryGroup
            ),
            "entry_links": _collect(elem, "entryLinks", EntryLink),
        }


# =============================================================================
# Catalogue
# =============================================================================


@dataclass(frozen=True)
class Catalogue(CatalogueNode):
    """One faction/army data document.

    Attributes:
        id: Unique identifier of the catalogue
        name: Display name, e.g. "Galactic Empire"
        revision: Revision counter maintained by the data authors
        game_system_id: Id of the game system file the catalogue builds on
        xmlns: Namespace of the root element, ``None`` if un-namespaced
        comment: Free-text comment element
        readme: Free-text readme element
    """

    TAG: ClassVar[str] = "catalogue"
    ATTRIBUTES: ClassVar[tuple[str, ...]] = (
        "id",
        "name",
        "revision",
        "battleScribeVersion",
        "authorName",
        "authorContact",
        "authorUrl",
        "library",
        "gameSystemId",
        "gameSystemRevision",
    )

    id: str | None = None
    name: str | None = None
    revision: str | None = None
    battle_scribe_version: str | None = None
    author_name: str | None = None
    author_contact: str | None = None
    author_url: str | None = None
    library: str | None = None
    game_system_id: str | None = None
    game_system_revision: str | None = None
    xmlns: str | None = None
    comment: str | None = None
    readme: str | None = None
    publications: tuple[Publication, ...] = ()
    profile_types: tuple[ProfileType, ...] = ()
    category_entries: tuple[CategoryEntry, ...] = ()
    entry_links: tuple[EntryLink, ...] = ()
    info_links: tuple[InfoLink, ...] = ()
    rules: tuple[Rule, ...] = ()
    shared_selection_entries: tuple[SelectionEntry, ...] = ()
    shared_selection_entry_groups: tuple[SelectionEntryGroup, ...] = ()
    shared_rules: tuple[Rule, ...] = ()
    shared_profiles: tuple[Profile, ...] = ()

    @classmethod
    def _decode_content(cls, elem: ET.Element) -> dict[str, Any]:
        xmlns = None
        if isinstance(elem.tag, str) and elem.tag.startswith("{"):
            xmlns = elem.tag[1:].split("}", 1)[0]
        return {
            "xmlns": xmlns,
            "comment": _text(elem, "comment"),
            "readme": _text(elem, "readme"),
            "publications": _collect(elem, "publications", Publication),
            "profile_types": _collect(elem, "profileTypes", ProfileType),
            "category_entries": _collect(elem, "categoryEntries", CategoryEntry),
            "entry_links": _collect(elem, "entryLinks", EntryLink),
            "info_links": _collect(elem, "infoLinks", InfoLink),
            "rules": _collect(elem, "rules", Rule),
            "shared_selection_entries": _collect(
                elem, "sharedSelectionEntries", SelectionEntry
            ),
            "shared_selection_entry_groups": _collect(
                elem, "sharedSelectionEntryGroups", SelectionEntryGroup
            ),
            "shared_rules": _collect(elem, "sharedRules", Rule),
            "shared_profiles": _collect(elem, "sharedProfiles", Profile),
        }

    def find(self, node_id: str) -> CatalogueNode | None:
        """Return the first node whose ``id`` equals ``node_id``, if any.

        Use this to follow ``target_id``/``child_id`` references; decoding
        itself never resolves them.
        """
        for node in self.iter_nodes():
            if getattr(node, "id", None) == node_id:
                return node
        return None
