"""Tests for rule defaults and rules-file validation."""

import json

import pytest

from menubar_shared.rules_schema import (
    DEFAULT_HELPER_PATTERNS,
    DEFAULT_PRIORITY,
    ClassificationRules,
    RulesValidationError,
    load_and_validate_rules,
    rules_from_mapping,
)


def _write(tmp_path, payload):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


class TestDefaults:
    def test_no_path_yields_defaults(self):
        assert load_and_validate_rules(None) == ClassificationRules()

    def test_lowered_tables(self):
        rules = ClassificationRules(helper_patterns=frozenset({"Helper"}), priority=("Docker",))
        assert rules.lowered_helper_patterns == ("helper",)
        assert rules.lowered_priority == ("docker",)

    def test_with_require_icon(self):
        rules = ClassificationRules()
        assert rules.with_require_icon(False) is rules
        tightened = rules.with_require_icon(True)
        assert tightened.require_icon
        assert tightened.priority == rules.priority
        assert tightened.lowered_priority == rules.lowered_priority


class TestRulesFile:
    def test_list_replaces_table(self, tmp_path):
        rules = load_and_validate_rules(_write(tmp_path, {"priority": ["Alpha", "Beta"]}))
        assert rules.priority == ("Alpha", "Beta")
        assert rules.helper_patterns == DEFAULT_HELPER_PATTERNS

    def test_add_and_remove_edit_table(self, tmp_path):
        payload = {"helper_patterns": {"add": ["widget"], "remove": ["agent"]}}
        rules = load_and_validate_rules(_write(tmp_path, payload))
        assert "widget" in rules.helper_patterns
        assert "agent" not in rules.helper_patterns
        assert "helper" in rules.helper_patterns

    def test_add_keeps_sequence_order(self):
        rules = rules_from_mapping({"priority": {"add": ["Zed"], "remove": ["Bartender"]}})
        assert rules.priority[-1] == "Zed"
        assert rules.priority[0] == DEFAULT_PRIORITY[1]

    def test_require_icon_flag(self):
        assert rules_from_mapping({"require_icon": True}).require_icon

    def test_entries_are_stripped(self):
        rules = rules_from_mapping({"system_prefixes": ["  com.vendor.  "]})
        assert rules.system_prefixes == ("com.vendor.",)


class TestValidationErrors:
    def test_missing_file(self, tmp_path):
        with pytest.raises(RulesValidationError, match="not found"):
            load_and_validate_rules(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(RulesValidationError, match="not valid JSON"):
            load_and_validate_rules(path)

    @pytest.mark.parametrize(
        "payload, message",
        [
            ([], "root must be a JSON object"),
            ({"colours": []}, "Unknown rule fields: colours"),
            ({"priority": "Docker"}, "must be a list"),
            ({"priority": {"replace": []}}, "only supports 'add' and 'remove'"),
            ({"priority": [1]}, "entries must be strings"),
            ({"priority": [" "]}, "entries must be non-empty"),
            ({"require_icon": "yes"}, "require_icon must be true or false"),
        ],
    )
    def test_rejects_malformed_rules(self, payload, message):
        with pytest.raises(RulesValidationError, match=message):
            rules_from_mapping(payload)

    def test_validation_error_is_value_error(self):
        assert issubclass(RulesValidationError, ValueError)
