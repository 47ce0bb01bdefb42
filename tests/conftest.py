"""Shared fixtures: a party XSD and an in-test ZIP builder."""

import struct
import zipfile
from pathlib import Path
from typing import Callable, Dict, Union

import pytest

from src.case_intake.core.config import IntakeSettings
from src.case_intake.core.metrics import MetricsCollector

PARTY_XSD = """<?xml version="1.0" encoding="utf-8"?>
<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema" elementFormDefault="qualified">
  <xs:element name="party">
    <xs:complexType>
      <xs:sequence>
        <xs:element name="applicationno" type="xs:string" />
        <xs:element name="name" type="xs:string" minOccurs="0" />
      </xs:sequence>
    </xs:complexType>
  </xs:element>
</xs:schema>
"""


def _party_xml(application_no: str = "12345", name: str = "Jane Citizen") -> bytes:
    return (
        '<?xml version="1.0" encoding="utf-8"?>'
        f"<party><applicationno>{application_no}</applicationno><name>{name}</name></party>"
    ).encode("utf-8")


@pytest.fixture
def party_xml() -> Callable[..., bytes]:
    """Factory for party.xml content."""
    return _party_xml


@pytest.fixture
def schema_path(tmp_path: Path) -> Path:
    path = tmp_path / "schema" / "party.xsd"
    path.parent.mkdir(parents=True)
    path.write_text(PARTY_XSD, encoding="utf-8")
    return path


@pytest.fixture
def make_zip(tmp_path: Path) -> Callable[..., Path]:
    """Build a ZIP from {entry name: content}; entries are written in dict order."""
    counter = {"n": 0}

    def _make(entries: Dict[str, Union[bytes, str]], name: str = None) -> Path:
        counter["n"] += 1
        path = tmp_path / "inbox" / (name or f"CaseFiles{counter['n']}.zip")
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w") as zf:
            for entry_name, content in entries.items():
                zf.writestr(entry_name, content)
        return path

    return _make


@pytest.fixture
def case_files_folder(tmp_path: Path) -> Path:
    return tmp_path / "case_files"


@pytest.fixture
def settings(case_files_folder: Path, schema_path: Path) -> IntakeSettings:
    return IntakeSettings(
        case_files_folder=case_files_folder,
        case_file_types=".pdf",
        party_schema_path=schema_path,
        admin_email="admin@example.com",
    )


@pytest.fixture
def metrics() -> MetricsCollector:
    return MetricsCollector()


@pytest.fixture
def make_corrupt_zip(tmp_path: Path) -> Callable[..., Path]:
    """Build a deflated ZIP whose `broken` entry has damaged compressed data."""

    def _make(entries: Dict[str, Union[bytes, str]], broken: str, name: str = "Corrupt.zip") -> Path:
        path = tmp_path / "inbox" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for entry_name, content in entries.items():
                zf.writestr(entry_name, content)
            info = zf.getinfo(broken)

        data = bytearray(path.read_bytes())
        # Local file header: 30 fixed bytes, then name and extra field
        name_len, extra_len = struct.unpack("<HH", data[info.header_offset + 26:info.header_offset + 30])
        middle = info.header_offset + 30 + name_len + extra_len + info.compress_size // 2
        for i in range(middle, middle + 8):
            data[i] ^= 0xFF
        path.write_bytes(bytes(data))
        return path

    return _make
