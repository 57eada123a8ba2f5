"""Tests for metadata loading and sensitive-category decoding."""

import json

import pytest

from bid_validator.core.metadata import Metadata, SensitiveCategoryMapping


class TestSensitiveCategoryMapping:
    """Linear decode with per-code overrides."""

    def test_threshold_boundary(self):
        mapping = SensitiveCategoryMapping(threshold=10, offset=9)

        assert mapping.decode(9) is None
        assert mapping.decode(10) == 1
        assert mapping.decode(12) == 3

    def test_override_wins_over_linear_rule(self):
        mapping = SensitiveCategoryMapping(threshold=10, offset=9, overrides={11: 7, 3: 5})

        assert mapping.decode(11) == 7
        assert mapping.decode(3) == 5
        assert mapping.decode(12) == 3

    def test_sensitive_categories_of(self, metadata):
        assert metadata.sensitive_categories_of({1, 4, 10, 13}) == {1, 4}


class TestMetadataLoading:
    """Packaged and custom metadata files."""

    def test_packaged_tables(self, metadata):
        assert metadata.vendors[1] == "Doubleclick Rich Media"
        assert metadata.describe("creative_attributes", 34).endswith("Flash")
        assert metadata.describe("vendors", 12345) == "unknown (12345)"

    def test_tables_are_read_only(self, metadata):
        with pytest.raises(TypeError):
            metadata.vendors[99] = "Injected"

    def test_unknown_table(self, metadata):
        with pytest.raises(ValueError):
            metadata.describe("sensitive_mapping", 1)

    def test_custom_file(self, tmp_path):
        path = tmp_path / "metadata.json"
        path.write_text(
            json.dumps(
                {
                    "vendors": {"42": "Custom Vendor"},
                    "sensitive_category_mapping": {
                        "threshold": 100,
                        "offset": 50,
                        "overrides": {"7": "2"},
                    },
                }
            )
        )

        metadata = Metadata.load(path)

        assert metadata.vendors == {42: "Custom Vendor"}
        assert metadata.decode_sensitive_category(99) is None
        assert metadata.decode_sensitive_category(100) == 50
        assert metadata.decode_sensitive_category(7) == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Metadata.load(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(ValueError, match="Invalid metadata file"):
            Metadata.load(path)
