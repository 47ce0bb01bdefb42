"""Tests for party.xml schema validation and application number extraction."""

import io

import pytest

from src.case_intake.core.errors import IntakeStage, MetadataValidationError, SchemaLoadError
from src.case_intake.intake.schema import load_schema, validate_and_extract_identifier


class TestLoadSchema:
    """Test XSD loading."""

    def test_loads_valid_schema(self, schema_path):
        schema = load_schema(schema_path)
        assert schema is not None

    def test_missing_schema_file(self, tmp_path):
        missing = tmp_path / "nope.xsd"
        with pytest.raises(SchemaLoadError) as exc_info:
            load_schema(missing)
        assert str(missing) in exc_info.value.message
        assert exc_info.value.stage == IntakeStage.METADATA_LOCATED

    def test_schema_that_is_not_xml(self, tmp_path):
        path = tmp_path / "broken.xsd"
        path.write_text("not xml at all", encoding="utf-8")
        with pytest.raises(SchemaLoadError):
            load_schema(path)

    def test_xml_that_is_not_a_schema(self, tmp_path):
        path = tmp_path / "plain.xsd"
        path.write_text("<party><applicationno>1</applicationno></party>", encoding="utf-8")
        with pytest.raises(SchemaLoadError):
            load_schema(path)


class TestValidateAndExtractIdentifier:
    """Test validation of party.xml content."""

    def test_returns_application_number(self, schema_path, party_xml):
        schema = load_schema(schema_path)
        assert validate_and_extract_identifier(io.BytesIO(party_xml("12345")), schema) == "12345"

    def test_strips_surrounding_whitespace(self, schema_path, party_xml):
        schema = load_schema(schema_path)
        assert validate_and_extract_identifier(io.BytesIO(party_xml("  A-77\n")), schema) == "A-77"

    def test_missing_element_fails_schema(self, schema_path):
        schema = load_schema(schema_path)
        doc = b"<party><name>Jane</name></party>"
        with pytest.raises(MetadataValidationError) as exc_info:
            validate_and_extract_identifier(io.BytesIO(doc), schema)
        assert "applicationno" in exc_info.value.message

    def test_wrong_root_element_fails_schema(self, schema_path):
        schema = load_schema(schema_path)
        doc = b"<person><applicationno>1</applicationno></person>"
        with pytest.raises(MetadataValidationError):
            validate_and_extract_identifier(io.BytesIO(doc), schema)

    def test_malformed_xml(self, schema_path):
        schema = load_schema(schema_path)
        with pytest.raises(MetadataValidationError) as exc_info:
            validate_and_extract_identifier(io.BytesIO(b"<party><applicationno>1</party>"), schema)
        assert exc_info.value.message.startswith("Unable to parse 'party.xml'")

    @pytest.mark.parametrize("value", ["", "   "])
    def test_empty_application_number(self, schema_path, party_xml, value):
        schema = load_schema(schema_path)
        with pytest.raises(MetadataValidationError) as exc_info:
            validate_and_extract_identifier(io.BytesIO(party_xml(value)), schema)
        assert exc_info.value.message == "Unable to get application number from 'party.xml'."

    @pytest.mark.parametrize("value", ["../escape", "a/b", "a\\b", ".."])
    def test_application_number_must_be_a_folder_name(self, schema_path, party_xml, value):
        schema = load_schema(schema_path)
        with pytest.raises(MetadataValidationError) as exc_info:
            validate_and_extract_identifier(io.BytesIO(party_xml(value)), schema)
        assert "is not a valid folder name" in exc_info.value.message

    def test_permissive_schema_without_field(self, tmp_path):
        # Schema accepts any party content, so the field can be absent after validation
        path = tmp_path / "loose.xsd"
        path.write_text(
            '<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">'
            '<xs:element name="party"><xs:complexType><xs:sequence>'
            '<xs:any processContents="skip" minOccurs="0" maxOccurs="unbounded"/>'
            "</xs:sequence></xs:complexType></xs:element></xs:schema>",
            encoding="utf-8",
        )
        schema = load_schema(path)
        with pytest.raises(MetadataValidationError) as exc_info:
            validate_and_extract_identifier(io.BytesIO(b"<party><other>1</other></party>"), schema)
        assert exc_info.value.message == "Unable to find 'applicationno' in 'party.xml'."

    def test_external_entities_are_not_resolved(self, schema_path, tmp_path):
        secret = tmp_path / "secret.txt"
        secret.write_text("s3cret", encoding="utf-8")
        doc = (
            f'<?xml version="1.0"?><!DOCTYPE party [<!ENTITY x SYSTEM "file://{secret}">]>'
            "<party><applicationno>&x;</applicationno></party>"
        ).encode("utf-8")
        schema = load_schema(schema_path)
        try:
            result = validate_and_extract_identifier(io.BytesIO(doc), schema)
        except MetadataValidationError:
            return
        assert "s3cret" not in result
