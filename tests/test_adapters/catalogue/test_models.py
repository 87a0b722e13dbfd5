"""Tests for adapters.catalogue.models module."""

from __future__ import annotations

import dataclasses
import xml.etree.ElementTree as ET

import pytest

from bsdata.adapters.catalogue.models import (
    Catalogue,
    Characteristic,
    Condition,
    ConditionGroup,
    Constraint,
    Cost,
    EntryLink,
    Modifier,
    ModifierGroup,
    Profile,
    Repeat,
    Rule,
    SelectionEntry,
    _as_bool,
    _field_name,
    _local_name,
)


class TestHelpers:
    """Tests for element helper functions."""

    def test_local_name_strips_namespace(self):
        """Should drop the {namespace} prefix."""
        assert _local_name("{http://example.com/schema}catalogue") == "catalogue"

    def test_local_name_without_namespace(self):
        """Should return plain tags unchanged."""
        assert _local_name("catalogue") == "catalogue"

    def test_local_name_of_comment(self):
        """Should return an empty name for non-string tags."""
        assert _local_name(ET.Comment) == ""

    def test_field_name_converts_camel_case(self):
        """Should convert camelCase attribute names to snake_case."""
        assert _field_name("typeId") == "type_id"
        assert _field_name("includeChildSelections") == "include_child_selections"
        assert _field_name("id") == "id"

    def test_field_name_escapes_keywords(self):
        """Should append an underscore to Python keywords."""
        assert _field_name("import") == "import_"

    def test_as_bool(self):
        """Should interpret boolean attribute strings."""
        assert _as_bool("true") is True
        assert _as_bool("True") is True
        assert _as_bool("false") is False
        assert _as_bool(None) is None
        assert _as_bool("") is None


class TestLeafNodes:
    """Tests for decoding leaf elements."""

    def test_cost_from_element(self):
        """Should read attributes and expose a numeric amount."""
        cost = Cost.from_element(ET.fromstring('<cost name="pts" typeId="points" value="12.5"/>'))
        assert cost.name == "pts"
        assert cost.type_id == "points"
        assert cost.value == "12.5"
        assert cost.amount == 12.5

    def test_cost_amount_absent(self):
        """Should return None when the value attribute is absent."""
        cost = Cost.from_element(ET.fromstring('<cost name="pts"/>'))
        assert cost.value is None
        assert cost.amount is None

    def test_cost_amount_not_a_number(self):
        """Should return None for a non-numeric value instead of raising."""
        cost = Cost.from_element(ET.fromstring('<cost name="pts" value="-"/>'))
        assert cost.value == "-"
        assert cost.amount is None
        entry = SelectionEntry(costs=(cost,))
        assert entry.cost("pts") is None

    def test_constraint_amount_not_a_number(self):
        """Should return None for a non-numeric constraint value."""
        constraint = Constraint.from_element(ET.fromstring('<constraint value="n/a" type="max"/>'))
        assert constraint.amount is None

    def test_absent_and_empty_attributes_differ(self):
        """Should keep absent as None and empty as an empty string."""
        rule = Rule.from_element(ET.fromstring('<rule id="r1" name=""/>'))
        assert rule.name == ""
        assert rule.page is None
        assert rule.hidden is None

    def test_rule_description(self):
        """Should read the description child text."""
        rule = Rule.from_element(
            ET.fromstring('<rule id="r1"><description>Move twice.</description></rule>')
        )
        assert rule.description == "Move twice."

    def test_rule_empty_description(self):
        """Should return an empty string for an empty description."""
        rule = Rule.from_element(ET.fromstring("<rule id='r1'><description/></rule>"))
        assert rule.description == ""

    def test_rule_without_description(self):
        """Should return None when there is no description element."""
        rule = Rule.from_element(ET.fromstring("<rule id='r1'/>"))
        assert rule.description is None

    def test_characteristic_value_is_text(self):
        """Should take the characteristic value from the element text."""
        item = Characteristic.from_element(
            ET.fromstring('<characteristic name="Wounds" typeId="w">3</characteristic>')
        )
        assert item.name == "Wounds"
        assert item.value == "3"

    def test_constraint_query_attributes(self):
        """Should decode the shared query attributes."""
        constraint = Constraint.from_element(
            ET.fromstring(
                '<constraint field="selections" scope="parent" value="2" '
                'percentValue="false" shared="true" includeChildSelections="true" '
                'id="c1" type="max"/>'
            )
        )
        assert constraint.field == "selections"
        assert constraint.scope == "parent"
        assert constraint.amount == 2.0
        assert constraint.percent_value == "false"
        assert constraint.include_child_selections == "true"
        assert constraint.include_child_forces is None
        assert constraint.type == "max"

    def test_repeat_attributes(self):
        """Should decode repeat-specific attributes."""
        repeat = Repeat.from_element(
            ET.fromstring('<repeat field="selections" value="1" childId="x" repeats="2" roundUp="true"/>')
        )
        assert repeat.child_id == "x"
        assert repeat.repeats == "2"
        assert repeat.round_up == "true"


class TestNestedNodes:
    """Tests for decoding nested structures."""

    def test_modifier_with_conditions(self):
        """Should decode conditions, groups and repeats of a modifier."""
        modifier = Modifier.from_element(
            ET.fromstring(
                """
                <modifier type="set" field="hidden" value="true">
                  <conditions>
                    <condition field="selections" scope="roster" value="1" childId="a" type="atLeast"/>
                    <condition field="selections" scope="roster" value="0" childId="b" type="equalTo"/>
                  </conditions>
                  <conditionGroups>
                    <conditionGroup type="or">
                      <conditionGroups>
                        <conditionGroup type="and">
                          <conditions><condition childId="c" type="lessThan"/></conditions>
                        </conditionGroup>
                      </conditionGroups>
                    </conditionGroup>
                  </conditionGroups>
                  <repeats><repeat value="1" repeats="1" childId="d"/></repeats>
                </modifier>
                """
            )
        )
        assert [c.child_id for c in modifier.conditions] == ["a", "b"]
        assert modifier.condition_groups[0].type == "or"
        inner = modifier.condition_groups[0].condition_groups[0]
        assert inner.type == "and"
        assert inner.conditions[0].child_id == "c"
        assert modifier.repeats[0].child_id == "d"

    def test_modifier_group_nests(self):
        """Should decode modifiers and nested modifier groups."""
        group = ModifierGroup.from_element(
            ET.fromstring(
                """
                <modifierGroup>
                  <modifiers><modifier type="set" field="hidden" value="false"/></modifiers>
                  <modifierGroups>
                    <modifierGroup>
                      <modifiers><modifier type="increment" field="points" value="5"/></modifiers>
                    </modifierGroup>
                  </modifierGroups>
                </modifierGroup>
                """
            )
        )
        assert group.modifiers[0].field == "hidden"
        assert group.modifier_groups[0].modifiers[0].value == "5"

    def test_selection_entry_nests_entries(self):
        """Should decode nested selection entries recursively."""
        entry = SelectionEntry.from_element(
            ET.fromstring(
                """
                <selectionEntry id="unit" name="Unit" type="unit" import="true">
                  <selectionEntries>
                    <selectionEntry id="model" name="Model" type="model">
                      <selectionEntries>
                        <selectionEntry id="gun" name="Gun" type="upgrade"/>
                      </selectionEntries>
                    </selectionEntry>
                  </selectionEntries>
                </selectionEntry>
                """
            )
        )
        assert entry.import_ == "true"
        assert entry.selection_entries[0].id == "model"
        assert entry.selection_entries[0].selection_entries[0].id == "gun"

    def test_ignores_unknown_elements(self):
        """Should skip elements that are not part of the model."""
        entry = SelectionEntry.from_element(
            ET.fromstring(
                """
                <selectionEntry id="e1" futureAttribute="x">
                  <futureThings><thing/></futureThings>
                  <costs><cost name="pts" value="1"/><unexpected/></costs>
                </selectionEntry>
                """
            )
        )
        assert entry.id == "e1"
        assert len(entry.costs) == 1

    def test_missing_collections_are_empty(self):
        """Should default child collections to empty tuples."""
        entry = SelectionEntry.from_element(ET.fromstring('<selectionEntry id="e1"/>'))
        assert entry.profiles == ()
        assert entry.selection_entries == ()
        assert entry.entry_links == ()


class TestCatalogueNode:
    """Tests for behaviour shared by all nodes."""

    def test_nodes_are_immutable(self):
        """Should reject attribute assignment."""
        cost = Cost(name="pts", value="1")
        with pytest.raises(dataclasses.FrozenInstanceError):
            cost.value = "2"  # type: ignore[misc]

    def test_flag(self):
        """Should interpret boolean attributes."""
        link = EntryLink(id="l1", hidden="true", collective="false")
        assert link.flag("hidden") is True
        assert link.flag("collective") is False
        assert link.flag("import_") is None

    def test_iter_nodes_in_document_order(self):
        """Should yield the node and its descendants depth first."""
        group = ConditionGroup(
            type="and",
            conditions=(Condition(child_id="a"), Condition(child_id="b")),
            condition_groups=(ConditionGroup(type="or", conditions=(Condition(child_id="c"),)),),
        )
        ids = [getattr(node, "child_id", None) for node in group.iter_nodes()]
        assert ids == [None, "a", "b", None, "c"]

    def test_to_dict(self):
        """Should convert recursively to dictionaries."""
        profile = Profile(
            id="p1",
            name="Trooper",
            characteristics=(Characteristic(name="Speed", value="2"),),
        )
        result = profile.to_dict()
        assert result["id"] == "p1"
        assert result["hidden"] is None
        assert result["characteristics"][0] == {"name": "Speed", "type_id": None, "value": "2"}

    def test_profile_characteristic_lookup(self):
        """Should return a characteristic value by name."""
        profile = Profile(characteristics=(Characteristic(name="Speed", value="2"),))
        assert profile.characteristic("Speed") == "2"
        assert profile.characteristic("Wounds") is None

    def test_selection_entry_cost_lookup(self):
        """Should return a cost amount by name."""
        entry = SelectionEntry(costs=(Cost(name="pts", value="30"),))
        assert entry.cost("pts") == 30.0
        assert entry.cost("crowns") is None


class TestCatalogueFind:
    """Tests for Catalogue.find."""

    def test_finds_nested_node(self):
        """Should locate a node anywhere in the tree."""
        catalogue = Catalogue(
            id="cat",
            shared_selection_entries=(
                SelectionEntry(id="outer", selection_entries=(SelectionEntry(id="inner"),)),
            ),
        )
        found = catalogue.find("inner")
        assert isinstance(found, SelectionEntry)
        assert found.id == "inner"

    def test_returns_none_for_unknown_id(self):
        """Should return None when no node has the id."""
        assert Catalogue(id="cat").find("missing") is None

    def test_returns_first_match(self):
        """Should return the first node in document order on duplicates."""
        first = SelectionEntry(id="dup", name="first")
        second = SelectionEntry(id="dup", name="second")
        catalogue = Catalogue(shared_selection_entries=(first, second))
        assert catalogue.find("dup") is first
