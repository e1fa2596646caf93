import pytest

from wcag_audit.features.analysis.exceptions import DuplicateRuleError
from wcag_audit.features.analysis.services.analyser import WCAGAnalyser, default_analyser
from wcag_audit.features.analysis.services.dom import parse_from_string
from wcag_audit.features.analysis.services.rules import RuleResult, TitleRule, WCAGRule


class CountingRule(WCAGRule):
    def __init__(self, name):
        self.name = name
        self.calls = 0

    def analyse(self, doc):
        self.calls += 1
        return RuleResult(passed=True, message=self.name)


class TestWCAGAnalyser:

    def test_add_rule_is_fluent(self):
        analyser = WCAGAnalyser()

        assert analyser.add_rule(CountingRule("a")) is analyser

    def test_results_follow_registration_order(self):
        analyser = WCAGAnalyser().add_rule(CountingRule("b")).add_rule(CountingRule("a"))

        results = analyser.analyse(parse_from_string(""))

        assert list(results) == ["b", "a"]

    def test_every_rule_runs_once(self):
        rules = [CountingRule("one"), CountingRule("two")]
        analyser = WCAGAnalyser()
        for rule in rules:
            analyser.add_rule(rule)

        analyser.analyse(parse_from_string("<p>x</p>"))

        assert [rule.calls for rule in rules] == [1, 1]

    def test_duplicate_names_are_rejected(self):
        analyser = WCAGAnalyser().add_rule(TitleRule())

        with pytest.raises(DuplicateRuleError):
            analyser.add_rule(TitleRule())
        assert len(analyser.rules) == 1

    def test_empty_analyser_returns_empty_mapping(self):
        assert WCAGAnalyser().analyse(parse_from_string("<p>x</p>")) == {}


class TestDefaultAnalyser:

    def test_registers_builtin_rules(self):
        assert [rule.name for rule in default_analyser().rules] == [
            "title-check",
            "img-alt-check",
            "input-label-check",
        ]

    def test_evaluating_twice_gives_identical_results(self):
        doc = parse_from_string(
            '<title>T</title><img src="a.png"><img alt=""><label for="x">X</label><input id="x"><input>'
        )
        analyser = default_analyser()

        first = analyser.analyse(doc)
        second = analyser.analyse(doc)

        assert first == second
        assert {name: result.model_dump() for name, result in first.items()} == {
            name: result.model_dump() for name, result in second.items()
        }

    def test_not_accessible_fixture_fails_every_rule(self):
        from wcag_audit.features.analysis.routes.fixtures import NOT_ACCESSIBLE_HTML

        results = default_analyser().analyse(parse_from_string(NOT_ACCESSIBLE_HTML))

        assert not results["title-check"].passed
        assert not results["img-alt-check"].passed
        assert results["img-alt-check"].details == {
            "totalImages": 2,
            "imagesWithoutAlt": 1,
            "imagesWithEmptyAlt": 1,
        }
        assert not results["input-label-check"].passed
        assert results["input-label-check"].details == {"totalInputs": 2, "inputsWithoutLabel": 2}

    def test_accessible_fixture_passes_every_rule(self):
        from wcag_audit.features.analysis.routes.fixtures import ACCESSIBLE_HTML

        results = default_analyser().analyse(parse_from_string(ACCESSIBLE_HTML))

        assert all(result.passed for result in results.values())
