"""
Tests for the rule schemas and the in-process rule catalog.
"""

import json

import pydantic
import pytest
from pydantic import TypeAdapter

from groundbook.schemas.pricing import RuleIn, RuleOut
from groundbook.services.pricing_engine import TimeWindow, ValidationError, WeekdayCondition
from groundbook.services.rule_catalog import RuleCatalog, parse_rules


class TestRuleSchemas:

    def test_clock_strings_become_hours(self):
        rule = TypeAdapter(RuleIn).validate_python({
            "kind": "off-peak",
            "discount_percent": 20,
            "condition": {"start": "12:00", "end": "15:00"},
        }).to_rule()

        assert rule.condition == TimeWindow(12, 15)
        assert rule.active is True

    def test_weekday_payload(self):
        rule = TypeAdapter(RuleIn).validate_python({
            "kind": "weekday",
            "discount_percent": 15,
            "condition": {"days_of_week": [1, 2, 3, 4]},
            "active": False,
        }).to_rule()

        assert rule.condition == WeekdayCondition(frozenset({1, 2, 3, 4}))
        assert rule.active is False

    def test_condition_shape_follows_kind(self):
        with pytest.raises(pydantic.ValidationError):
            TypeAdapter(RuleIn).validate_python({
                "kind": "bulk",
                "discount_percent": 10,
                "condition": {"days_of_week": [1]},
            })

    def test_unknown_kind_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            TypeAdapter(RuleIn).validate_python({"kind": "holiday", "discount_percent": 10, "condition": {}})

    def test_partial_hours_rejected(self):
        item = TypeAdapter(RuleIn).validate_python({
            "kind": "off-peak",
            "discount_percent": 20,
            "condition": {"start": "12:30", "end": "15:00"},
        })
        with pytest.raises(ValidationError):
            item.to_rule()

    def test_rule_out_round_trips_condition(self):
        rules = parse_rules([{"kind": "weekday", "discount_percent": 15, "condition": {"days_of_week": [4, 1]}}])
        out = RuleOut.from_rule(rules[0])
        assert out.condition == {"days_of_week": [1, 4]}
        assert out.discount_percent == 15.0


class TestParseRules:

    def test_missing_ids_are_numbered(self):
        rules = parse_rules({"rules": [
            {"kind": "bulk", "discount_percent": 10, "condition": {"min_hours": 3}},
            {"kind": "bulk", "discount_percent": 15, "condition": {"min_hours": 5}},
        ]})
        assert [r.id for r in rules] == ["1", "2"]

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValidationError, match="duplicate rule id"):
            parse_rules([
                {"id": "x", "kind": "bulk", "discount_percent": 10, "condition": {"min_hours": 3}},
                {"id": "x", "kind": "bulk", "discount_percent": 15, "condition": {"min_hours": 5}},
            ])

    def test_malformed_payload_rejected(self):
        with pytest.raises(ValidationError, match="invalid rule payload"):
            parse_rules([{"kind": "bulk", "discount_percent": 10}])

    def test_object_without_rules_key_rejected(self):
        with pytest.raises(ValidationError, match="invalid rule payload"):
            parse_rules({"discounts": []})

    def test_string_active_flag_rejected(self):
        with pytest.raises(ValidationError):
            parse_rules([{"kind": "bulk", "discount_percent": 10, "condition": {"min_hours": 3}, "active": "maybe"}])

    def test_non_ascii_window_hours_in_file(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps([
            {"kind": "off-peak", "discount_percent": 20, "condition": {"start": "²:00", "end": "15:00"}},
        ]), encoding="utf-8")
        with pytest.raises(ValidationError):
            RuleCatalog().load(path=path)

    def test_out_of_range_percent_rejected(self):
        with pytest.raises(ValidationError):
            parse_rules([{"kind": "bulk", "discount_percent": 120, "condition": {"min_hours": 3}}])


class TestRuleCatalog:

    @pytest.fixture
    def catalog(self):
        catalog = RuleCatalog()
        catalog.load(path="")
        return catalog

    def test_seed_rules_loaded(self, catalog):
        rules = catalog.list_rules()
        assert [r.id for r in rules] == ["1", "2", "3", "4"]
        assert [r.kind for r in rules] == ["weekday", "bulk", "bulk", "off-peak"]
        assert catalog.get("4").condition == TimeWindow(12, 15)

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"rules": [
            {"id": "late", "kind": "off-peak", "discount_percent": 25, "condition": {"start": 22, "end": 26}},
        ]}))

        catalog = RuleCatalog()
        rules = catalog.load(path=path)

        assert len(rules) == 1
        assert catalog.get("late").discount_percent == 25

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValidationError, match="not found"):
            RuleCatalog().load(path=tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text("{not json")
        with pytest.raises(ValidationError, match="not valid JSON"):
            RuleCatalog().load(path=path)

    def test_unknown_rule(self, catalog):
        with pytest.raises(KeyError):
            catalog.get("99")
        with pytest.raises(KeyError):
            catalog.update("99", active=False)

    def test_update_discount(self, catalog):
        updated = catalog.update("1", discount_percent=20)

        assert updated.discount_percent == 20
        assert updated.condition == WeekdayCondition(frozenset({1, 2, 3, 4}))
        assert catalog.get("1") == updated
        assert [r.id for r in catalog.list_rules()] == ["1", "2", "3", "4"]

    def test_update_condition_and_active(self, catalog):
        updated = catalog.update("4", condition={"start": "10:00", "end": "12:00"}, active=False)

        assert updated.condition == TimeWindow(10, 12)
        assert updated.active is False
        assert updated.name == "Lunch Hours Off-Peak"

    def test_invalid_update_leaves_rule_unchanged(self, catalog):
        before = catalog.get("2")
        with pytest.raises(ValidationError):
            catalog.update("2", discount_percent=150)
        with pytest.raises(ValidationError):
            catalog.update("2", condition={"days_of_week": [1]})
        assert catalog.get("2") == before

    def test_snapshot_is_immutable(self, catalog):
        snapshot = catalog.list_rules()
        catalog.update("3", active=False)
        assert snapshot[2].active is True
        assert catalog.list_rules()[2].active is False
