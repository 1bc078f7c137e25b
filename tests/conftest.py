from __future__ import annotations

import zipfile
from collections.abc import Callable, Mapping
from pathlib import Path

import pytest

from sheetcache.core.config import StagingSettings

MAIN_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PACKAGE_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"

WORKBOOK_XML = f"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<workbook xmlns="{MAIN_NS}" xmlns:r="{REL_NS}">
  <sheets>
    <sheet name="First" sheetId="1" r:id="rId1"/>
    <sheet name="Second" sheetId="3" state="hidden" r:id="rId4"/>
  </sheets>
</workbook>
"""

WORKBOOK_RELS_XML = f"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="{PACKAGE_REL_NS}">
  <Relationship Id="rId1" Type="{REL_NS}/worksheet" Target="worksheets/sheet1.xml"/>
  <Relationship Id="rId2" Type="{REL_NS}/styles" Target="styles.xml"/>
  <Relationship Id="rId3" Type="{REL_NS}/sharedStrings" Target="sharedStrings.xml"/>
  <Relationship Id="rId4" Type="{REL_NS}/worksheet" Target="/xl/worksheets/data.xml"/>
  <Relationship Id="rId5" Type="{REL_NS}/hyperlink" Target="https://example.org" TargetMode="External"/>
</Relationships>
"""

SHARED_STRINGS_XML = f"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<sst xmlns="{MAIN_NS}" count="14" uniqueCount="14">
  <si><t>General</t></si>
  <si><t>Number</t></si>
  <si><t>DateTime</t></si>
  <si><t>Date</t></si>
  <si><t>Time</t></si>
  <si><t>Shared String</t></si>
  <si><t>Rich String</t></si>
  <si><t>Money</t></si>
  <si><t>Fraction</t></si>
  <si><t>This is a shared string.</t></si>
  <si>
    <r><rPr><b/><sz val="11"/></rPr><t>Hello</t></r>
    <r><rPr><i/></rPr><t xml:space="preserve"> world</t></r>
  </si>
  <si><t/></si>
  <si><t>after empty</t></si>
  <si><t xml:space="preserve">  </t></si>
</sst>
"""

STYLES_XML = f"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<styleSheet xmlns="{MAIN_NS}">
  <numFmts count="2">
    <numFmt numFmtId="8" formatCode="&quot;$&quot;#,##0.00_);[Red]\\(&quot;$&quot;#,##0.00\\)"/>
    <numFmt numFmtId="164" formatCode="[$-409]m/d/yy\\ h:mm\\ AM/PM;@"/>
  </numFmts>
  <cellStyleXfs count="1">
    <xf numFmtId="14" applyNumberFormat="1"/>
  </cellStyleXfs>
  <cellXfs count="8">
    <xf numFmtId="0" fontId="0"/>
    <xf numFmtId="1" applyNumberFormat="1"/>
    <xf numFmtId="164" applyNumberFormat="1"/>
    <xf numFmtId="14" applyNumberFormat="1"/>
    <xf numFmtId="18" applyNumberFormat="1"/>
    <xf numFmtId="0"/>
    <xf numFmtId="8" applyNumberFormat="1"/>
    <xf numFmtId="12" applyNumberFormat="1"/>
  </cellXfs>
</styleSheet>
"""

FIRST_SHEET_XML = f"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<worksheet xmlns="{MAIN_NS}" xmlns:r="{REL_NS}">
  <dimension ref="A1:I5"/>
  <sheetData>
    <row r="1">
      <c r="A1" t="s"><v>0</v></c>
      <c r="B1" t="s"><v>1</v></c>
      <c r="C1" t="s"><v>2</v></c>
      <c r="D1" t="s"><v>3</v></c>
      <c r="E1" t="s"><v>4</v></c>
      <c r="F1" t="s"><v>5</v></c>
      <c r="G1" t="s"><v>6</v></c>
      <c r="H1" t="s"><v>7</v></c>
      <c r="I1" t="s"><v>8</v></c>
    </row>
    <row r="2">
      <c r="A2" t="s"><v>9</v></c>
      <c r="B2" s="1"><v>1</v></c>
      <c r="C2" s="2"><v>42732.582638888889</v></c>
      <c r="D2" s="3"><v>42732</v></c>
      <c r="E2" s="4"><v>0.58263888888888882</v></c>
      <c r="F2" t="s"><v>10</v></c>
      <c r="G2" s="5"><v>3.5</v></c>
      <c r="H2" s="6"><v>1.39</v></c>
      <c r="I2" s="7"><v>0.5</v></c>
    </row>
    <row r="3">
      <c r="B3" s="1"/>
    </row>
    <row r="4">
      <c r="A4" t="b"><v>1</v></c>
      <c r="B4" t="e"><v>#DIV/0!</v></c>
      <c r="C4" t="inlineStr"><is><t>inline text</t></is></c>
      <c r="D4" t="str"><f>CONCAT("a","b")</f><v>ab</v></c>
      <c r="E4" t="d"><v>2016-12-28T13:59:00</v></c>
      <c r="F4" t="s"><v>11</v></c>
      <c r="G4" t="s"><v>12</v></c>
    </row>
    <row r="5">
      <c><v>7</v></c>
      <c r="C5"><v>8</v></c>
      <c><v>9</v></c>
    </row>
  </sheetData>
</worksheet>
"""

SECOND_SHEET_XML = f"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<worksheet xmlns="{MAIN_NS}">
  <sheetData>
    <row r="1"><c r="A1"><v>10</v></c></row>
    <row r="2"><c r="B2"><v>20</v></c></row>
  </sheetData>
</worksheet>
"""

SAMPLE_PARTS = {
    "[Content_Types].xml": '<?xml version="1.0" encoding="UTF-8"?><Types/>',
    "xl/workbook.xml": WORKBOOK_XML,
    "xl/_rels/workbook.xml.rels": WORKBOOK_RELS_XML,
    "xl/sharedStrings.xml": SHARED_STRINGS_XML,
    "xl/styles.xml": STYLES_XML,
    "xl/worksheets/sheet1.xml": FIRST_SHEET_XML,
    "xl/worksheets/data.xml": SECOND_SHEET_XML,
}

XlsxWriter = Callable[[Path, Mapping[str, str]], Path]


def _write_xlsx(path: Path, parts: Mapping[str, str]) -> Path:
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, content in parts.items():
            archive.writestr(name, content)
    return path


@pytest.fixture
def write_xlsx() -> XlsxWriter:
    return _write_xlsx


@pytest.fixture
def sample_parts() -> dict[str, str]:
    return dict(SAMPLE_PARTS)


@pytest.fixture
def sample_xlsx(tmp_path: Path) -> Path:
    return _write_xlsx(tmp_path / "sample.xlsx", SAMPLE_PARTS)


@pytest.fixture
def staging_dir(tmp_path: Path) -> Path:
    return tmp_path / "staging"


@pytest.fixture
def staging_settings(staging_dir: Path) -> StagingSettings:
    return StagingSettings(staging_dir=staging_dir)
