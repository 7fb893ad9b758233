"""
Unit tests for filter rules, composition and date strategies
"""
from datetime import datetime

import pytest

from dataforge_store.exceptions import (
    IllegalOperatorError, IncompatibleOperatorError, NumericComparisonError,
)
from dataforge_store.filtering import (
    DateStrategy, Filter, FilterRule, Operator, PatternDateStrategy, RuleFormat,
    get_default_date_strategy, set_default_date_strategy,
)


class TestFilterRule:
    """Test suite for single rules"""

    def test_equals_any_value(self):
        """Test a multi-value rule matches any of its values"""
        rule = FilterRule("A", ["1", "7"])

        assert rule.check_value("1")
        assert rule.check_value("7")
        assert not rule.check_value("4")
        assert rule.value is None

    def test_none_and_null_never_match(self):
        """Test absent values and the null literal"""
        rule = FilterRule("A", "x", Operator.NOT_EQUALS)

        assert not rule.check_value(None)
        assert not rule.check_value("null")
        assert rule.check_value("y")

    def test_wildcards_match_everything(self):
        """Test * and % values"""
        assert FilterRule("A", "*").check_value("anything")
        assert FilterRule("A", "%", Operator.GREATER_THAN).check_value("text")

    def test_string_operators(self):
        """Test contains, starts/ends with and case handling"""
        assert FilterRule("A", "ell", Operator.CONTAINS).check_value("Hello")
        assert not FilterRule("A", "ELL", Operator.CONTAINS).check_value("Hello")
        assert FilterRule("A", "ELL", Operator.CONTAINS_IGNORE_CASE).check_value("Hello")
        assert FilterRule("A", "He", Operator.STARTS_WITH).check_value("Hello")
        assert FilterRule("A", "LO", Operator.ENDS_WITH_IGNORE_CASE).check_value("Hello")
        assert FilterRule("A", "hello", Operator.EQUALS_IGNORE_CASE).check_value("HELLO")
        assert not FilterRule("A", "hello", Operator.NOT_EQUALS_IGNORE_CASE).check_value("HELLO")

    def test_candidate_is_trimmed(self):
        """Test surrounding whitespace of the candidate is ignored"""
        assert FilterRule("A", "x").check_value("  x ")

    def test_numeric_operators(self):
        """Test numeric comparators"""
        assert FilterRule("N", "10", Operator.GREATER_THAN).check_value("10.5")
        assert FilterRule("N", "10", Operator.GREATER_OR_EQUAL_THAN).check_value("10")
        assert FilterRule("N", "10", Operator.LESS_THAN).check_value("-3")
        assert not FilterRule("N", "10", Operator.LESS_OR_EQUAL_THAN).check_value("11")

    def test_numeric_operator_rejects_text_value(self):
        """Test a numeric comparator with a non-numeric value fails at construction"""
        with pytest.raises(IncompatibleOperatorError):
            FilterRule("N", "abc", Operator.GREATER_THAN)

    def test_numeric_operator_on_text_candidate(self):
        """Test comparing a non-numeric candidate raises"""
        rule = FilterRule("N", "3", Operator.LESS_THAN)

        with pytest.raises(NumericComparisonError):
            rule.check_value("abc")

    def test_concatenation_as_comparator(self):
        """Test AND/OR/IN/BETWEEN cannot compare"""
        with pytest.raises(IllegalOperatorError):
            FilterRule("A", "1", Operator.OR)
        with pytest.raises(IllegalOperatorError):
            FilterRule("A", "1", Operator.EQUALS, concatenation=Operator.EQUALS)

    def test_operator_by_name(self):
        """Test operators given as strings"""
        rule = FilterRule("A", "x", "equals_ignore_case", "or")

        assert rule.operator is Operator.EQUALS_IGNORE_CASE
        assert rule.concatenation is Operator.OR
        with pytest.raises(ValueError):
            Operator.from_name("SIMILAR")

    def test_empty_values_rejected(self):
        """Test a rule needs at least one value"""
        with pytest.raises(IncompatibleOperatorError):
            FilterRule("A", [])

    def test_regex_format(self):
        """Test regex values match the whole candidate"""
        rule = FilterRule("A", r"\d+", rule_format=RuleFormat.REGEX)

        assert rule.check_value("123")
        assert not rule.check_value("12a")
        assert FilterRule("A", "b+", Operator.CONTAINS, rule_format=RuleFormat.REGEX).check_value("abbbc")
        assert FilterRule("A", r"\d+", Operator.NOT_EQUALS, rule_format=RuleFormat.REGEX).check_value("x")

    def test_invalid_regex(self):
        """Test a broken pattern fails at construction"""
        with pytest.raises(IncompatibleOperatorError):
            FilterRule("A", "(", rule_format=RuleFormat.REGEX)

    def test_rule_string(self):
        """Test SQL-like rendering"""
        assert FilterRule("B", "2").rule_string == "AND B = 2"
        quoted = FilterRule("B", ["1", "2"], concatenation=Operator.OR, rule_format=RuleFormat.QUOTED_STRING)
        assert quoted.rule_string == "OR B IN ('1','2')"

    def test_rule_equality_ignores_value_order(self):
        """Test rules compare on header, operator and value set"""
        assert FilterRule("A", ["1", "2"]) == FilterRule("A", ["2", "1"])
        assert FilterRule("A", "1") != FilterRule("A", "1", Operator.NOT_EQUALS)


class TestDateRules:
    """Test suite for date operators"""

    def test_date_comparisons(self):
        """Test date equals, before and after with default formats"""
        assert FilterRule("D", "2024-01-15", Operator.DATE_EQUALS).check_value("15.01.2024")
        assert FilterRule("D", "2024-01-15", Operator.DATE_BEFORE).check_value("2023-12-31")
        assert FilterRule("D", "2024-01-15", Operator.DATE_AFTER).check_value("2024-02-01")
        assert not FilterRule("D", "2024-01-15", Operator.DATE_AFTER).check_value("no date")

    def test_contains_date(self):
        """Test a date is found inside longer text"""
        rule = FilterRule("D", "2024-01-15", Operator.CONTAINS_DATE)

        assert rule.check_value("report_2024-01-15.csv")
        assert FilterRule("D", "2024-01-15", Operator.CONTAINS_DATE_BEFORE).check_value("log 20240101 done")
        assert not rule.check_value("report.csv")

    def test_date_rule_rejects_non_date_value(self):
        """Test a date operator with a non-date value fails at construction"""
        with pytest.raises(IncompatibleOperatorError):
            FilterRule("D", "tomorrow", Operator.DATE_EQUALS)

    def test_custom_strategy(self):
        """Test replacing the process default date strategy"""

        class MonthNameStrategy(DateStrategy):
            def parse(self, text):
                try:
                    return datetime.strptime(text.strip(), "%B %Y")
                except ValueError:
                    return None

        set_default_date_strategy(MonthNameStrategy())

        assert FilterRule("D", "March 2024", Operator.DATE_AFTER).check_value("April 2024")
        assert isinstance(get_default_date_strategy(), MonthNameStrategy)

        set_default_date_strategy(None)
        assert isinstance(get_default_date_strategy(), PatternDateStrategy)

    def test_rule_level_strategy(self):
        """Test a strategy given to a single rule"""
        strategy = PatternDateStrategy(["%m/%d/%Y"])
        rule = FilterRule("D", "01/15/2024", Operator.DATE_EQUALS, date_strategy=strategy)

        assert rule.check_value("01/15/2024")
        assert strategy.compare("01/15/2024", "bad") is None


class TestFilter:
    """Test suite for Filter composition"""

    def test_empty_filter_matches_everything(self):
        """Test an empty filter"""
        assert Filter().matches_record({})
        assert Filter().is_empty()

    def test_or_joins_previous_group(self):
        """Test A AND B OR C AND D evaluates as A and (B or C) and D"""
        flt = (Filter()
               .add_filter_rule("a", "1")
               .add_filter_rule("b", "1")
               .add_filter_rule("c", "1", concatenation=Operator.OR)
               .add_filter_rule("d", "1"))

        assert [len(g) for g in flt.groups()] == [1, 2, 1]
        assert flt.matches_record({"a": "1", "b": "0", "c": "1", "d": "1"})
        assert not flt.matches_record({"a": "1", "b": "0", "c": "0", "d": "1"})
        assert not flt.matches_record({"a": "0", "b": "1", "c": "1", "d": "1"})

    def test_first_rule_concatenation_ignored(self):
        """Test a leading OR rule still forms the first group"""
        flt = Filter().add_filter_rule("a", "1", concatenation=Operator.OR).add_filter_rule("b", "1")

        assert not flt.matches_record({"a": "1", "b": "0"})

    def test_absent_header_does_not_match(self):
        """Test a rule on a header the item lacks"""
        flt = Filter().add_filter_rule("missing", "x", Operator.NOT_EQUALS)

        assert not flt.matches_record({"a": "1"})

    def test_allowed_headers(self):
        """Test rules on headers outside the allow-list are dropped"""
        flt = Filter(allowed_headers=["Name"])

        assert flt.add_rule(FilterRule("name", "x"))
        assert not flt.add_rule(FilterRule("City", "x"))
        assert flt.get_rule_headers() == ["name"]

        flt.set_allowed_headers(["City"])
        assert flt.is_empty()

    def test_rule_queries_and_deletion(self):
        """Test value lookup, partition and deletion"""
        flt = (Filter()
               .add_filter_rule("A", ["1", "2"])
               .add_filter_rule("A", "5", Operator.GREATER_THAN)
               .add_filter_rule("B", "x"))

        assert flt.get_rule_values("A") == ["1", "2"]
        numeric, rest = flt.partition(lambda r: r.operator.is_numeric)
        assert len(numeric) == 1
        assert len(rest) == 2
        assert flt.delete_rule("A") == 2
        assert len(flt) == 1
        assert flt.delete_rule(FilterRule("B", "x")) == 1
