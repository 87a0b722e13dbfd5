"""
Shared pytest fixtures for bsdata tests.

Fixtures are organized by scope:
- function: Fresh state for each test (default)
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

# =============================================================================
# Sample Data
# =============================================================================

EMPIRE_CATALOGUE = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<catalogue id="cat-empire" name="Galactic Empire" revision="12" battleScribeVersion="2.03" authorName="BSData" library="false" gameSystemId="gs-legion" gameSystemRevision="7" xmlns="http://www.battlescribe.net/schema/catalogueSchema">
  <comment></comment>
  <publications>
    <publication id="pub-core" name="Core Rulebook" shortName="Core" publisher="FFG" publicationDate="2018"/>
  </publications>
  <profileTypes>
    <profileType id="pt-unit" name="Unit">
      <characteristicTypes>
        <characteristicType id="ct-wounds" name="Wounds"/>
        <characteristicType id="ct-speed" name="Speed"/>
      </characteristicTypes>
    </profileType>
  </profileTypes>
  <categoryEntries>
    <categoryEntry id="cat-troops" name="Troops" hidden="false"/>
    <categoryEntry id="cat-commander" name="Commander"/>
  </categoryEntries>
  <entryLinks>
    <entryLink id="el-vader" name="Darth Vader" hidden="false" collective="false" import="true" targetId="se-vader" type="selectionEntry">
      <modifiers>
        <modifier type="set" field="hidden" value="true">
          <conditions>
            <condition field="selections" scope="roster" value="1" percentValue="false" shared="true" includeChildSelections="true" includeChildForces="true" childId="se-vader" type="atLeast"/>
          </conditions>
        </modifier>
      </modifiers>
      <categoryLinks>
        <categoryLink id="cl-vader" name="Commander" hidden="false" targetId="cat-commander" primary="true"/>
      </categoryLinks>
    </entryLink>
    <entryLink id="el-troopers" name="Stormtroopers" hidden="false" targetId="se-troopers" type="selectionEntry"/>
  </entryLinks>
  <sharedSelectionEntries>
    <selectionEntry id="se-vader" name="Darth Vader" publicationId="pub-core" page="42" hidden="false" collective="false" import="true" type="unit">
      <profiles>
        <profile id="pr-vader" name="Darth Vader" hidden="false" typeId="pt-unit" typeName="Unit">
          <characteristics>
            <characteristic name="Wounds" typeId="ct-wounds">8</characteristic>
            <characteristic name="Speed" typeId="ct-speed">1</characteristic>
          </characteristics>
        </profile>
      </profiles>
      <infoLinks>
        <infoLink id="il-relentless" name="Relentless" hidden="false" targetId="rule-relentless" type="rule"/>
      </infoLinks>
      <costs>
        <cost name="pts" typeId="points" value="200.0"/>
      </costs>
      <constraints>
        <constraint field="selections" scope="roster" value="1" percentValue="false" shared="true" includeChildSelections="false" includeChildForces="false" id="con-vader-max" type="max"/>
      </constraints>
    </selectionEntry>
    <selectionEntry id="se-troopers" name="Stormtroopers" hidden="false" collective="false" import="true" type="unit">
      <selectionEntryGroups>
        <selectionEntryGroup id="seg-heavy" name="Heavy Weapon" hidden="false" collective="false" import="true" defaultSelectionEntryId="se-dlt">
          <constraints>
            <constraint field="selections" scope="parent" value="1" id="con-heavy-max" type="max"/>
          </constraints>
          <selectionEntries>
            <selectionEntry id="se-dlt" name="DLT-19 Stormtrooper" hidden="false" type="upgrade">
              <costs>
                <cost name="pts" typeId="points" value="24"/>
              </costs>
            </selectionEntry>
          </selectionEntries>
        </selectionEntryGroup>
      </selectionEntryGroups>
      <entryLinks>
        <entryLink id="el-grenades" name="Grenades" targetId="seg-grenades" type="selectionEntryGroup"/>
      </entryLinks>
      <modifiers>
        <modifier type="increment" field="points" value="10">
          <repeats>
            <repeat field="selections" scope="roster" value="1" percentValue="false" shared="true" includeChildSelections="false" includeChildForces="false" childId="se-vader" repeats="1" roundUp="false"/>
          </repeats>
          <conditionGroups>
            <conditionGroup type="or">
              <conditions>
                <condition field="selections" scope="force" value="0" childId="cat-commander" type="greaterThan"/>
              </conditions>
              <conditionGroups>
                <conditionGroup type="and">
                  <conditions>
                    <condition field="selections" scope="roster" value="2" childId="se-troopers" type="atLeast"/>
                  </conditions>
                </conditionGroup>
              </conditionGroups>
            </conditionGroup>
          </conditionGroups>
        </modifier>
      </modifiers>
      <costs>
        <cost name="pts" typeId="points" value="44"/>
      </costs>
    </selectionEntry>
  </sharedSelectionEntries>
  <sharedSelectionEntryGroups>
    <selectionEntryGroup id="seg-grenades" name="Grenades" hidden="false" collective="false" import="true">
      <modifierGroups>
        <modifierGroup>
          <conditions>
            <condition field="selections" scope="parent" value="1" childId="se-troopers" type="atLeast"/>
          </conditions>
          <modifiers>
            <modifier type="set" field="hidden" value="false"/>
          </modifiers>
        </modifierGroup>
      </modifierGroups>
      <entryLinks>
        <entryLink id="el-impact" name="Impact Grenades" targetId="se-missing" type="selectionEntry"/>
      </entryLinks>
    </selectionEntryGroup>
  </sharedSelectionEntryGroups>
  <sharedRules>
    <rule id="rule-relentless" name="Relentless" publicationId="pub-core" page="88" hidden="false">
      <description>After performing a move action, may perform a free attack action.</description>
    </rule>
  </sharedRules>
  <sharedProfiles>
    <profile id="pr-e11" name="E-11" hidden="false" typeId="pt-unit" typeName="Unit">
      <characteristics>
        <characteristic name="Wounds" typeId="ct-wounds"/>
      </characteristics>
    </profile>
  </sharedProfiles>
</catalogue>
"""

REBEL_CATALOGUE = """<?xml version="1.0" encoding="UTF-8"?>
<catalogue id="cat-rebels" name="Rebel Alliance" revision="3" gameSystemId="gs-legion">
  <sharedSelectionEntries>
    <selectionEntry id="se-luke" name="Luke Skywalker" type="unit">
      <costs>
        <cost name="pts" typeId="points" value="160"/>
      </costs>
    </selectionEntry>
  </sharedSelectionEntries>
</catalogue>
"""


@pytest.fixture
def empire_xml() -> str:
    """Namespaced catalogue exercising every node type."""
    return EMPIRE_CATALOGUE


@pytest.fixture
def rebel_xml() -> str:
    """Minimal un-namespaced catalogue."""
    return REBEL_CATALOGUE


@pytest.fixture
def catalogue_dir(tmp_path):
    """Directory with two catalogues and two unrelated files."""
    directory = tmp_path / "catalogues"
    directory.mkdir()
    (directory / "Army.cat.xml").write_text(EMPIRE_CATALOGUE, encoding="utf-8")
    (directory / "Army.cat").write_text(REBEL_CATALOGUE, encoding="utf-8")
    (directory / "readme.md").write_text("# Data files\n", encoding="utf-8")
    (directory / "icon.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    return directory


# =============================================================================
# Local Git Source
# =============================================================================


def _git(*args: str, cwd: Path) -> None:
    subprocess.run(
        ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
    )


@pytest.fixture
def git_source(tmp_path):
    """Local stand-in for the BSData organisation.

    Holds one repository, ``star-wars-legion``, with two commits:
    tag ``1.0.0`` has one catalogue, the branch tip adds a second.

    Returns:
        ``file://`` URL to use as the base URL
    """
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    base = tmp_path / "remote"
    repo = base / "star-wars-legion"
    repo.mkdir(parents=True)

    _git("init", "--quiet", cwd=repo)
    (repo / "Galactic Empire.cat").write_text(EMPIRE_CATALOGUE, encoding="utf-8")
    (repo / "Star Wars Legion.gst").write_text("<gameSystem/>", encoding="utf-8")
    _git("add", ".", cwd=repo)
    _git("commit", "--quiet", "-m", "Initial data", cwd=repo)
    _git("tag", "1.0.0", cwd=repo)

    (repo / "Rebel Alliance.cat").write_text(REBEL_CATALOGUE, encoding="utf-8")
    _git("add", ".", cwd=repo)
    _git("commit", "--quiet", "-m", "Add rebels", cwd=repo)

    return base.as_uri()
