"""Unit tests for the consent record codec and record builders."""

import json
import logging

import pytest

from cookie_manager.preferences import (
    ConsentRecordCodec,
    MalformedConsentRecord,
    accept_all_record,
    is_denied,
    record_from_selections,
    reject_all_record,
)


class TestConsentRecordCodec:
    """Test ConsentRecordCodec functionality."""

    def setup_method(self):
        """Set up test fixtures."""
        self.codec = ConsentRecordCodec()

    def test_load_absent(self):
        assert self.codec.load(None) is None

    def test_load_empty_value(self):
        assert self.codec.load("") is None

    def test_load_valid_record(self):
        assert self.codec.load('{"analytics":"on","feedback":"off"}') == {
            "analytics": "on",
            "feedback": "off",
        }

    def test_load_empty_object_is_valid(self):
        """Test an empty record is still a recorded choice."""
        assert self.codec.load("{}") == {}

    @pytest.mark.parametrize("raw", ["not json", "{analytics:on}", "[1, 2]", "\"on\"", "42", "null"])
    def test_load_malformed(self, raw):
        assert self.codec.load(raw, "cm-user-preferences") is None

    def test_load_malformed_is_logged(self, caplog):
        with caplog.at_level(logging.ERROR, logger="cookie_manager.preferences"):
            self.codec.load("{broken", "cm-user-preferences")

        assert "cm-user-preferences" in caplog.text

    def test_decode_raises(self):
        with pytest.raises(MalformedConsentRecord):
            self.codec.decode("{broken")

        with pytest.raises(MalformedConsentRecord):
            self.codec.decode("[]")

    def test_save_is_compact_json(self):
        raw = self.codec.save({"analytics": "on"})

        assert raw == '{"analytics":"on"}'
        assert self.codec.load(raw) == {"analytics": "on"}

    def test_save_does_not_check_categories(self):
        raw = self.codec.save({"not-a-category": "whatever"})
        assert json.loads(raw) == {"not-a-category": "whatever"}


class TestMarkers:
    """Test permissive marker reading."""

    def test_denial_markers(self):
        assert is_denied("off") is True
        assert is_denied("false") is True

    def test_other_values_are_not_denials(self):
        assert is_denied("on") is False
        assert is_denied("true") is False
        assert is_denied("OFF") is False
        assert is_denied("") is False
        assert is_denied(False) is False
        assert is_denied(None) is False


class TestRecordBuilders:
    """Test consent record builders."""

    def test_accept_all(self, sample_manifest):
        assert accept_all_record(sample_manifest) == {"analytics": "on", "feedback": "on"}

    def test_reject_all(self, sample_manifest):
        assert reject_all_record(sample_manifest) == {"analytics": "off", "feedback": "off"}

    def test_accept_all_empty_manifest(self):
        assert accept_all_record([]) == {}

    def test_record_from_selections_keeps_only_present_groups(self):
        record = record_from_selections({"analytics": "on", "feedback": None, "": "on"})
        assert record == {"analytics": "on"}

    def test_record_from_selections_keeps_unknown_values(self):
        assert record_from_selections({"analytics": "maybe"}) == {"analytics": "maybe"}
