"""
Tests for rule-set parsing, serialization and the active-set store.
"""

import json

import pytest

from warranty_engine.core.rule_store import (
    RULE_STORAGE_KEY,
    RuleSetStore,
    RuleSetValidationError,
    parse_rule_set_from_json,
    serialize_rule_set,
)
from warranty_engine.core.rules import ClassificationRuleSet
from warranty_engine.core.storage import InMemoryStorage


def rule_document(**overrides) -> dict:
    document = {
        "version": "custom-1",
        "phenomena": [
            {"code": "heater", "label": "Heater", "keywords": ["heater"], "priority": 5},
            {"code": "other", "label": "Other", "keywords": [], "isFallback": True},
        ],
        "causes": [{"code": "unknown", "label": "Unknown", "keywords": []}],
        "contaminations": [{"code": "none", "label": "None", "keywords": []}],
        "severity": [{"label": "High", "keywords": ["fire"], "costThreshold": 1000}],
        "flags": [{"id": "safety", "label": "Safety Risk", "keywords": ["fire"]}],
    }
    document.update(overrides)
    return document


class TestParseRuleSet:
    """Tests for parse_rule_set_from_json and serialize_rule_set."""

    def test_parse_valid_document(self) -> None:
        """Test a valid document parses with aliases resolved."""
        rule_set = parse_rule_set_from_json(json.dumps(rule_document()))
        assert rule_set.version == "custom-1"
        assert rule_set.phenomena[1].is_fallback is True
        assert rule_set.severity[0].cost_threshold == 1000

    def test_round_trip_is_lossless(self, default_rules: ClassificationRuleSet) -> None:
        """Test serialize then parse gives back an equal rule set."""
        text = serialize_rule_set(default_rules)
        assert parse_rule_set_from_json(text) == default_rules

    def test_serialized_form(self, default_rules: ClassificationRuleSet) -> None:
        """Test camelCase keys, 2-space indent and omitted optionals."""
        text = serialize_rule_set(default_rules)
        assert '\n  "version"' in text
        assert '"isFallback": true' in text
        assert '"costThreshold"' in text
        assert "null" not in text

    def test_invalid_json(self) -> None:
        """Test malformed JSON is reported as a validation error."""
        with pytest.raises(RuleSetValidationError, match="Invalid rule file"):
            parse_rule_set_from_json("{not json")

    def test_empty_category_rejected(self) -> None:
        """Test every taxonomy needs at least one rule."""
        with pytest.raises(RuleSetValidationError, match="phenomena"):
            parse_rule_set_from_json(json.dumps(rule_document(phenomena=[])))

    @pytest.mark.parametrize("missing", ["severity", "flags", "causes"])
    def test_missing_section_rejected(self, missing: str) -> None:
        """Test an import that omits a section is rejected, not defaulted."""
        document = rule_document()
        del document[missing]
        with pytest.raises(RuleSetValidationError, match=missing):
            parse_rule_set_from_json(json.dumps(document))

    def test_duplicate_codes_rejected(self) -> None:
        """Test codes must be unique within a category."""
        causes = [
            {"code": "dup", "label": "A", "keywords": []},
            {"code": "dup", "label": "B", "keywords": []},
        ]
        with pytest.raises(RuleSetValidationError, match="duplicate"):
            parse_rule_set_from_json(json.dumps(rule_document(causes=causes)))

    @pytest.mark.parametrize(
        "phenomena",
        [
            [{"code": "a", "label": "A", "keywords": "heater"}],
            [{"code": "a", "label": "A", "keywords": [], "priority": "10"}],
            [{"label": "A", "keywords": []}],
        ],
    )
    def test_wrong_types_rejected(self, phenomena: list) -> None:
        """Test field types are enforced without coercion."""
        with pytest.raises(RuleSetValidationError):
            parse_rule_set_from_json(json.dumps(rule_document(phenomena=phenomena)))

    def test_unknown_severity_label_rejected(self) -> None:
        """Test severity labels are restricted to High, Medium and Low."""
        document = rule_document(severity=[{"label": "Critical", "keywords": []}])
        with pytest.raises(RuleSetValidationError):
            parse_rule_set_from_json(json.dumps(document))

    def test_validation_error_is_value_error(self) -> None:
        """Test callers can catch a plain ValueError."""
        with pytest.raises(ValueError):
            parse_rule_set_from_json("[]")


class TestRuleSetStore:
    """Tests for RuleSetStore."""

    def test_defaults_without_storage(self, default_rules: ClassificationRuleSet) -> None:
        """Test the packaged rules are active by default."""
        store = RuleSetStore()
        assert store.get() == default_rules
        assert store.version == default_rules.version

    def test_loads_valid_stored_rules(self) -> None:
        """Test a stored rule set takes precedence."""
        storage = InMemoryStorage({RULE_STORAGE_KEY: json.dumps(rule_document())})
        assert RuleSetStore(storage).version == "custom-1"

    def test_invalid_stored_rules_fall_back(self, default_rules: ClassificationRuleSet) -> None:
        """Test an unreadable stored document is ignored."""
        storage = InMemoryStorage({RULE_STORAGE_KEY: '{"version": 1}'})
        assert RuleSetStore(storage).version == default_rules.version

    def test_set_persists_deep_copy(self) -> None:
        """Test set replaces, persists and detaches the active set."""
        storage = InMemoryStorage()
        store = RuleSetStore(storage)
        custom = parse_rule_set_from_json(json.dumps(rule_document()))

        store.set(custom)
        custom.phenomena[0].label = "Mutated"

        assert store.get().phenomena[0].label == "Heater"
        assert parse_rule_set_from_json(storage.get(RULE_STORAGE_KEY)).version == "custom-1"

    def test_set_without_persist(self) -> None:
        """Test persist=False keeps storage untouched."""
        storage = InMemoryStorage()
        store = RuleSetStore(storage)
        store.set(parse_rule_set_from_json(json.dumps(rule_document())), persist=False)

        assert store.version == "custom-1"
        assert storage.get(RULE_STORAGE_KEY) is None

    def test_reset_restores_default(self, default_rules: ClassificationRuleSet) -> None:
        """Test reset re-activates and persists the default."""
        storage = InMemoryStorage({RULE_STORAGE_KEY: json.dumps(rule_document())})
        store = RuleSetStore(storage)
        store.reset()

        assert store.version == default_rules.version
        assert parse_rule_set_from_json(storage.get(RULE_STORAGE_KEY)).version == default_rules.version

    def test_failed_import_leaves_store_unchanged(self, default_rules: ClassificationRuleSet) -> None:
        """Test a rejected import does not touch the active set."""
        store = RuleSetStore()
        with pytest.raises(RuleSetValidationError):
            store.import_json(json.dumps(rule_document(causes=[])))
        assert store.get() == default_rules

    def test_import_and_export(self) -> None:
        """Test import activates and export serializes the active set."""
        store = RuleSetStore()
        store.import_json(json.dumps(rule_document()))
        assert json.loads(store.export_json())["version"] == "custom-1"
