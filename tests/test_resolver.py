"""Tests for state and level resolution."""

from typing import Any

import pytest

from identity.engine import (
    MatchRule,
    level_rules,
    resolve,
    resolve_level,
    resolve_state,
    state_rules,
)
from identity.policy import PolicyConfig, parse_policy


@pytest.fixture
def all_policy(all_mapping_policy: dict[str, Any]) -> PolicyConfig:
    return parse_policy(all_mapping_policy)


@pytest.fixture
def any_policy(any_mapping_policy: dict[str, Any]) -> PolicyConfig:
    return parse_policy(any_mapping_policy)


class TestMatchRule:
    def test_requires_all(self):
        rule = MatchRule(target="active", requires={"a_1": "yes", "b_1": "yes"})
        assert rule.matches({"a_1": "yes", "b_1": "yes"})
        assert not rule.matches({"a_1": "yes"})
        assert not rule.matches({"a_1": "yes", "b_1": "no"})

    def test_any_of(self):
        rule = MatchRule(target="locked", any_of=["trade", "withdraw"])
        assert rule.matches({"withdraw": "whatever"})
        assert not rule.matches({"deposit": "whatever"})

    def test_empty_rule_never_matches(self):
        assert not MatchRule(target="active").matches({})
        assert not MatchRule(target="active").matches({"email": "verified"})

    def test_resolve_returns_default(self):
        assert resolve({}, [MatchRule(target=1, any_of=["x_1"])], 0) == 0

    def test_resolve_first_match_wins(self):
        rules = [
            MatchRule(target="first", any_of=["shared"]),
            MatchRule(target="second", any_of=["shared"]),
        ]
        assert resolve({"shared": "yes"}, rules, "pending") == "first"


class TestResolveStateAllPolicy:
    def test_pending_without_facts(self, all_policy: PolicyConfig):
        assert resolve_state({}, all_policy) == "pending"

    def test_pending_with_one_requirement(self, all_policy: PolicyConfig):
        assert resolve_state({"phone": "verified"}, all_policy) == "pending"
        assert resolve_state({"documents": "verified"}, all_policy) == "pending"

    def test_active_with_all_requirements(self, all_policy: PolicyConfig):
        facts = {"phone": "verified", "documents": "verified"}
        assert resolve_state(facts, all_policy) == "active"

    def test_requirement_value_must_match(self, all_policy: PolicyConfig):
        facts = {"phone": "verified", "documents": "rejected"}
        assert resolve_state(facts, all_policy) == "pending"

    def test_extra_facts_keep_active(self, all_policy: PolicyConfig):
        facts = {"phone": "verified", "documents": "verified", "random": "verified"}
        assert resolve_state(facts, all_policy) == "active"

    def test_activation_beats_triggers(self, all_policy: PolicyConfig):
        facts = {"phone": "verified", "documents": "verified", "email": "verified"}
        assert resolve_state(facts, all_policy) == "active"

    def test_rollback_falls_to_matching_trigger(self, all_policy: PolicyConfig):
        facts = {"documents": "verified", "email": "verified"}
        assert resolve_state(facts, all_policy) == "active_one_of_1_label"

    def test_empty_requirements_never_activate(self):
        policy = parse_policy({"state_triggers": {"locked": ["trade"]}})
        assert resolve_state({}, policy) == "pending"
        assert resolve_state({"email": "verified"}, policy) == "pending"


class TestResolveStateAnyPolicy:
    def test_single_trigger_key(self, any_policy: PolicyConfig):
        assert resolve_state({"trade": "suspicious"}, any_policy) == "locked"

    def test_value_ignored(self, any_policy: PolicyConfig):
        assert resolve_state({"withdraw": "anything"}, any_policy) == "locked"

    def test_unrelated_key(self, any_policy: PolicyConfig):
        assert resolve_state({"random": "suspicious"}, any_policy) == "pending"

    def test_remaining_key_keeps_state(self, any_policy: PolicyConfig):
        facts = {"trade": "suspicious", "withdraw": "suspicious"}
        assert resolve_state(facts, any_policy) == "locked"
        del facts["trade"]
        assert resolve_state(facts, any_policy) == "locked"
        del facts["withdraw"]
        assert resolve_state(facts, any_policy) == "pending"

    @pytest.mark.parametrize("key", ["first", "second", "third"])
    def test_one_of_three(self, all_policy: PolicyConfig, key: str):
        assert resolve_state({key: "verified"}, all_policy) == "active_one_of_3_labels"

    def test_declaration_order_decides(self, all_policy: PolicyConfig):
        facts = {"first": "verified", "email": "verified"}
        assert resolve_state(facts, all_policy) == "active_one_of_1_label"

        reordered = parse_policy({
            "state_triggers": {
                "active_one_of_3_labels": ["first", "second", "third"],
                "active_one_of_1_label": ["email"],
            },
        })
        assert resolve_state(facts, reordered) == "active_one_of_3_labels"


class TestIdempotence:
    def test_same_facts_same_state(self, all_policy: PolicyConfig):
        facts = {"phone": "verified", "documents": "verified"}
        first = resolve_state(facts, all_policy)
        second = resolve_state(facts, all_policy)
        assert first == second == "active"

    def test_does_not_mutate_facts(self, all_policy: PolicyConfig):
        facts = {"phone": "verified"}
        resolve_state(facts, all_policy)
        resolve_level(facts, all_policy)
        assert facts == {"phone": "verified"}


class TestResolveLevel:
    @pytest.fixture
    def policy(self, level_policy: dict[str, Any]) -> PolicyConfig:
        return parse_policy(level_policy)

    def test_default_level(self, policy: PolicyConfig):
        assert resolve_level({}, policy) == 0

    def test_without_level_rules(self, all_policy: PolicyConfig):
        assert resolve_level({"phone": "verified", "documents": "verified"}, all_policy) == 0

    def test_levels_in_declaration_order(self, policy: PolicyConfig):
        assert resolve_level({"email": "verified"}, policy) == 1
        assert resolve_level({"email": "verified", "phone": "verified"}, policy) == 2
        facts = {"email": "verified", "phone": "verified", "document": "verified"}
        assert resolve_level(facts, policy) == 3

    def test_rejected_document_keeps_lower_level(self, policy: PolicyConfig):
        facts = {"email": "verified", "phone": "verified", "document": "rejected"}
        assert resolve_level(facts, policy) == 2

    def test_any_of_level_rule(self):
        policy = parse_policy({"level_rules": [{"level": 1, "any_of": ["referral", "invite"]}]})
        assert resolve_level({"invite": "used"}, policy) == 1
        assert resolve_level({"other": "used"}, policy) == 0


class TestRuleLists:
    def test_state_rules_shape(self, all_policy: PolicyConfig):
        rules = state_rules(all_policy)
        assert [r.target for r in rules] == ["active", "active_one_of_1_label", "active_one_of_3_labels"]
        assert rules[0].requires == {"phone": "verified", "documents": "verified"}
        assert rules[2].any_of == ["first", "second", "third"]

    def test_level_rules_shape(self, level_policy: dict[str, Any]):
        rules = level_rules(parse_policy(level_policy))
        assert [r.target for r in rules] == [3, 2, 1]
