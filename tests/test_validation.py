"""Tests for input parsing, range validation and derived quantities."""

import pytest

from validation import (
    Invalid,
    ParseError,
    SpO2WarningLevel,
    Valid,
    calculate_fio2_from_flow,
    calculate_map,
    calculate_pf_ratio,
    estimate_pao2_from_spo2,
    get_spo2_warning,
    parse_number,
    validate_all_inputs,
    validate_value,
)


class TestParseNumber:
    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty(self, raw):
        result = parse_number(raw)
        assert isinstance(result, Invalid)
        assert result.reason is ParseError.EMPTY_VALUE

    @pytest.mark.parametrize("raw", ["abc", "1.2.3", "nan", float("nan"), True, [3], {"v": 1}, (1, 2)])
    def test_not_a_number(self, raw):
        result = parse_number(raw)
        assert isinstance(result, Invalid)
        assert result.reason is ParseError.NOT_A_NUMBER

    @pytest.mark.parametrize("raw, expected", [("3", 3.0), (" 4.5 ", 4.5), (7, 7.0), (0.25, 0.25), ("1e1", 10.0)])
    def test_numbers(self, raw, expected):
        result = parse_number(raw)
        assert isinstance(result, Valid)
        assert result.value == expected


class TestValidateValue:
    def test_in_range(self):
        result = validate_value("bilirubin", "12")
        assert result.is_valid
        assert result.value == 12.0

    def test_bounds_are_inclusive(self):
        assert validate_value("bilirubin", "0.1").is_valid
        assert validate_value("bilirubin", "50").is_valid
        assert validate_value("o2_flow", "0").is_valid

    def test_out_of_range(self):
        result = validate_value("bilirubin", "60")
        assert not result.is_valid
        assert result.reason is ParseError.OUT_OF_RANGE
        assert (result.min, result.max) == (0.1, 50)
        assert result.message == "Valid range: 0.1 - 50 mg/dL"

    def test_out_of_range_without_unit(self):
        assert validate_value("inr", "11").message == "Valid range: 0.5 - 10"

    def test_empty_and_non_numeric_messages(self):
        assert validate_value("creatinine", "").message == "Please enter a value"
        assert validate_value("creatinine", "high").message == "Please enter a number"

    def test_unknown_field_accepts_any_number(self):
        result = validate_value("lactate", "99")
        assert result.is_valid
        assert result.value == 99.0


class TestDerivedQuantities:
    def test_map(self):
        assert calculate_map(120, 80) == 93
        assert calculate_map("90", "60") == 70
        assert calculate_map(100, 65) == 77

    def test_map_missing_operand(self):
        assert calculate_map(None, 80) is None
        assert calculate_map(120, "") is None
        assert calculate_map("abc", 80) is None

    def test_fio2_from_flow(self):
        assert calculate_fio2_from_flow(2) == 29
        assert calculate_fio2_from_flow("0") == 21
        assert calculate_fio2_from_flow(None) is None

    def test_fio2_is_not_clamped(self):
        assert calculate_fio2_from_flow(15) == 81

    def test_pf_ratio_percent_fio2(self):
        assert calculate_pf_ratio(300, 29) == 1034

    def test_pf_ratio_fractional_fio2(self):
        assert calculate_pf_ratio(300, 0.5) == 600
        assert calculate_pf_ratio(100, 1) == 100

    def test_pf_ratio_rounds_half_up(self):
        assert calculate_pf_ratio(100.25, 0.5) == 201

    def test_pf_ratio_undefined(self):
        assert calculate_pf_ratio(300, 0) is None
        assert calculate_pf_ratio(300, -5) is None
        assert calculate_pf_ratio(None, 29) is None
        assert calculate_pf_ratio(300, "") is None

    def test_estimate_pao2(self):
        assert estimate_pao2_from_spo2(95) == 60
        assert estimate_pao2_from_spo2(90) == 51
        assert estimate_pao2_from_spo2("70") == 36

    @pytest.mark.parametrize("spo2", [70, 80, 88, 95, 99, 99.9])
    def test_estimate_pao2_stays_in_bounds(self, spo2):
        assert 30 <= estimate_pao2_from_spo2(spo2) <= 150

    @pytest.mark.parametrize("spo2", [100, 69.9, 50, None, "", "n/a"])
    def test_estimate_pao2_rejected(self, spo2):
        assert estimate_pao2_from_spo2(spo2) is None


class TestSpO2Warning:
    @pytest.mark.parametrize("spo2, level", [
        (98, SpO2WarningLevel.WARNING),
        (100, SpO2WarningLevel.WARNING),
        (97, SpO2WarningLevel.CAUTION),
        (95, SpO2WarningLevel.CAUTION),
        (94, SpO2WarningLevel.NONE),
        (88, SpO2WarningLevel.NONE),
        (None, SpO2WarningLevel.NONE),
    ])
    def test_levels(self, spo2, level):
        assert get_spo2_warning(spo2)["level"] == level.value

    def test_message_only_when_warning(self):
        assert get_spo2_warning(90)["message"] == ""
        assert "limited accuracy" in get_spo2_warning(96)["message"]


class TestValidateAllInputs:
    def test_baseline(self, baseline_inputs):
        result = validate_all_inputs(baseline_inputs)
        assert result.is_valid
        assert result.errors == {}
        v = result.validated_inputs
        assert v["map"] == 70
        assert v["fio2"] == 29
        assert v["pf_ratio"] == 862
        assert v["pao2"] == 250
        assert v["pao2_source"] == "measured"
        assert v["he_grade"] == 0
        assert v["rrt"] is False
        assert v["vasopressors"] is False
        assert v["use_spo2"] is False

    def test_missing_required_fields(self):
        result = validate_all_inputs({})
        assert not result.is_valid
        for name in ("bilirubin", "creatinine", "inr", "sbp", "dbp", "o2_flow", "pao2"):
            assert result.errors[name] == "Please enter a value"
        assert "map" not in result.validated_inputs
        assert result.validated_inputs["he_grade"] == 0

    def test_invalid_bp_skips_map(self, baseline_inputs):
        baseline_inputs["sbp"] = "300"
        result = validate_all_inputs(baseline_inputs)
        assert not result.is_valid
        assert "sbp" in result.errors
        assert "map" not in result.validated_inputs

    def test_spo2_path(self, baseline_inputs):
        baseline_inputs.update(use_spo2=True, spo2="95", pao2="")
        result = validate_all_inputs(baseline_inputs)
        assert result.is_valid
        v = result.validated_inputs
        assert v["spo2"] == 95
        assert v["pao2"] == 60
        assert v["pao2_source"] == "estimated"
        assert v["pf_ratio"] == 207

    def test_spo2_path_accepts_form_flag(self, baseline_inputs):
        baseline_inputs.update(use_spo2="on", spo2="92", pao2="")
        assert validate_all_inputs(baseline_inputs).validated_inputs["pao2_source"] == "estimated"

    def test_spo2_of_100_is_rejected(self, baseline_inputs):
        baseline_inputs.update(use_spo2=True, spo2="100")
        result = validate_all_inputs(baseline_inputs)
        assert not result.is_valid
        assert "Cannot estimate PaO2" in result.errors["spo2"]
        assert "pf_ratio" not in result.validated_inputs

    def test_spo2_out_of_range(self, baseline_inputs):
        baseline_inputs.update(use_spo2=True, spo2="60")
        result = validate_all_inputs(baseline_inputs)
        assert result.errors["spo2"] == "Valid range: 70 - 100 %"

    def test_zero_flow_is_room_air(self, baseline_inputs):
        baseline_inputs["o2_flow"] = "0"
        v = validate_all_inputs(baseline_inputs).validated_inputs
        assert v["fio2"] == 21
        assert v["pf_ratio"] == 1190

    @pytest.mark.parametrize("raw, expected", [("yes", True), ("on", True), ("true", True),
                                               ("false", False), ("", False), (None, False)])
    def test_flags(self, baseline_inputs, raw, expected):
        baseline_inputs["rrt"] = raw
        baseline_inputs["vasopressors"] = raw
        v = validate_all_inputs(baseline_inputs).validated_inputs
        assert v["rrt"] is expected
        assert v["vasopressors"] is expected

    @pytest.mark.parametrize("raw, expected", [(None, 0), ("", 0), ("1", 1), (2, 2)])
    def test_he_grade(self, baseline_inputs, raw, expected):
        baseline_inputs["he_grade"] = raw
        result = validate_all_inputs(baseline_inputs)
        assert result.is_valid
        assert result.validated_inputs["he_grade"] == expected

    @pytest.mark.parametrize("raw", ["3", 1.5, "grade"])
    def test_invalid_he_grade(self, baseline_inputs, raw):
        baseline_inputs["he_grade"] = raw
        result = validate_all_inputs(baseline_inputs)
        assert not result.is_valid
        assert "he_grade" in result.errors
