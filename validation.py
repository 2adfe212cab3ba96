"""
Input validation and derived physiological quantities for CLIF-C OF scoring.

Raw values arrive as form strings or numbers. Each field is checked against
its range in VALIDATION_RANGES, then MAP, FiO2, P/F ratio and (optionally) an
SpO2-based PaO2 estimate are derived from the validated values.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

import numpy as np
import pandas as pd

from benchmarks import VALIDATION_RANGES

logger = logging.getLogger(__name__)

Number = Union[int, float]

REQUIRED_FIELDS = ('bilirubin', 'creatinine', 'inr', 'sbp', 'dbp', 'o2_flow')

TRUE_STRINGS = {'1', 'true', 'yes', 'on'}


class ParseError(Enum):
    EMPTY_VALUE = 'empty_value'
    NOT_A_NUMBER = 'not_a_number'
    OUT_OF_RANGE = 'out_of_range'


class SpO2WarningLevel(str, Enum):
    NONE = 'none'
    CAUTION = 'caution'    # limited accuracy, 94 < SpO2 <= 97
    WARNING = 'warning'    # highly inaccurate, SpO2 > 97


@dataclass(frozen=True)
class Valid:
    value: float
    is_valid: bool = True


@dataclass(frozen=True)
class Invalid:
    reason: ParseError
    min: Optional[Number] = None
    max: Optional[Number] = None
    unit: str = ''
    is_valid: bool = False

    @property
    def message(self) -> str:
        if self.reason is ParseError.EMPTY_VALUE:
            return 'Please enter a value'
        if self.reason is ParseError.NOT_A_NUMBER:
            return 'Please enter a number'
        return f'Valid range: {self.min} - {self.max} {self.unit}'.rstrip()


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: Dict[str, str] = field(default_factory=dict)
    validated_inputs: Dict[str, Any] = field(default_factory=dict)


# ---------- Parsing helpers ----------

def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    return False


def parse_number(value: Any) -> Union[Valid, Invalid]:
    """Parse a raw value into a float, keeping 'empty' apart from 'unparseable'."""
    if _is_empty(value):
        return Invalid(ParseError.EMPTY_VALUE)
    if isinstance(value, bool) or not pd.api.types.is_scalar(value):
        return Invalid(ParseError.NOT_A_NUMBER)
    if isinstance(value, str):
        value = value.strip()
    number = pd.to_numeric(value, errors='coerce')
    if pd.isna(number) or not np.isfinite(number):
        return Invalid(ParseError.NOT_A_NUMBER)
    return Valid(float(number))


def _to_float(value: Any) -> Optional[float]:
    parsed = parse_number(value)
    return parsed.value if parsed.is_valid else None


def _round_half_up(value: float) -> int:
    return int(np.floor(value + 0.5))


def as_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    return bool(value)


# ---------- Field validation ----------

def validate_value(field_name: str, value: Any) -> Union[Valid, Invalid]:
    """
    Validate one raw field value against its configured range.

    Fields without a configured range are accepted once they parse as numbers.
    """
    parsed = parse_number(value)
    if not parsed.is_valid:
        return parsed

    bounds = VALIDATION_RANGES.get(field_name)
    if bounds is None:
        return parsed

    if parsed.value < bounds['min'] or parsed.value > bounds['max']:
        return Invalid(ParseError.OUT_OF_RANGE, bounds['min'], bounds['max'], bounds['unit'])
    return parsed


def _validate_he_grade(value: Any) -> Union[Valid, Invalid]:
    if _is_empty(value):
        return Valid(0)
    result = validate_value('he_grade', value)
    if result.is_valid and not float(result.value).is_integer():
        bounds = VALIDATION_RANGES['he_grade']
        return Invalid(ParseError.OUT_OF_RANGE, bounds['min'], bounds['max'], bounds['unit'])
    return result


# ---------- Derived quantities ----------

def calculate_map(sbp: Any, dbp: Any) -> Optional[int]:
    """Mean arterial pressure: (SBP + 2 * DBP) / 3."""
    sbp_val = _to_float(sbp)
    dbp_val = _to_float(dbp)
    if sbp_val is None or dbp_val is None:
        return None
    return _round_half_up((sbp_val + 2 * dbp_val) / 3)


def calculate_fio2_from_flow(o2_flow_lpm: Any) -> Optional[float]:
    """Nasal prong FiO2 in percent: 21 + 4 * L/min. Not clamped."""
    flow = _to_float(o2_flow_lpm)
    if flow is None:
        return None
    return 21 + 4 * flow


def calculate_pf_ratio(pao2: Any, fio2: Any) -> Optional[int]:
    """
    PaO2/FiO2 ratio.

    FiO2 above 1 is read as a percentage, otherwise as a fraction.
    """
    pao2_val = _to_float(pao2)
    fio2_val = _to_float(fio2)
    if pao2_val is None or fio2_val is None:
        return None

    fio2_fraction = fio2_val / 100 if fio2_val > 1 else fio2_val
    if fio2_fraction <= 0:
        return None
    return _round_half_up(pao2_val / fio2_fraction)


def estimate_pao2_from_spo2(spo2: Any) -> Optional[int]:
    """
    Estimate PaO2 from SpO2 with the inverted Severinghaus relation:
    PaO2 = 11.2 * ln(SpO2 / (100 - SpO2)) + 26.6, clamped to 30-150 mmHg.

    SpO2 must lie in [70, 100); 100% has no finite estimate.
    """
    spo2_val = _to_float(spo2)
    if spo2_val is None or spo2_val < 70 or spo2_val >= 100:
        return None

    estimate = 11.2 * np.log(spo2_val / (100 - spo2_val)) + 26.6
    return _round_half_up(np.clip(estimate, 30, 150))


def get_spo2_warning(spo2: Any) -> Dict[str, str]:
    spo2_val = _to_float(spo2)
    if spo2_val is None:
        return {'level': SpO2WarningLevel.NONE.value, 'message': ''}

    if spo2_val > 97:
        return {
            'level': SpO2WarningLevel.WARNING.value,
            'message': 'SpO2 > 97%: PaO2 estimate is highly inaccurate. '
                       'Arterial blood gas analysis is recommended.'
        }
    if spo2_val > 94:
        return {
            'level': SpO2WarningLevel.CAUTION.value,
            'message': 'SpO2 94-97%: PaO2 estimate has limited accuracy.'
        }
    return {'level': SpO2WarningLevel.NONE.value, 'message': ''}


# ---------- Full input set ----------

def _validate_field(field_name: str, value: Any, errors: Dict[str, str],
                    validated: Dict[str, Any]) -> bool:
    result = validate_value(field_name, value)
    if result.is_valid:
        validated[field_name] = result.value
    else:
        errors[field_name] = result.message
    return result.is_valid


def validate_all_inputs(inputs: Dict[str, Any]) -> ValidationResult:
    """
    Validate a raw input set and compute the derived quantities.

    Derived values that cannot be computed are simply left out of
    ``validated_inputs``; only recorded field errors make the result invalid.
    """
    errors: Dict[str, str] = {}
    validated: Dict[str, Any] = {}

    for name in REQUIRED_FIELDS:
        _validate_field(name, inputs.get(name), errors, validated)

    if 'sbp' in validated and 'dbp' in validated:
        validated['map'] = calculate_map(validated['sbp'], validated['dbp'])

    use_spo2 = as_flag(inputs.get('use_spo2'))
    validated['use_spo2'] = use_spo2

    if use_spo2:
        if _validate_field('spo2', inputs.get('spo2'), errors, validated):
            estimated = estimate_pao2_from_spo2(validated['spo2'])
            if estimated is not None:
                validated['pao2'] = estimated
                validated['pao2_source'] = 'estimated'
            else:
                errors['spo2'] = 'Cannot estimate PaO2 from this SpO2 (70-99% required)'
    elif _validate_field('pao2', inputs.get('pao2'), errors, validated):
        validated['pao2_source'] = 'measured'

    if 'o2_flow' in validated:
        validated['fio2'] = calculate_fio2_from_flow(validated['o2_flow'])

    if validated.get('pao2') is not None and validated.get('fio2') is not None:
        validated['pf_ratio'] = calculate_pf_ratio(validated['pao2'], validated['fio2'])

    validated['rrt'] = as_flag(inputs.get('rrt'))
    validated['vasopressors'] = as_flag(inputs.get('vasopressors'))

    he_grade = _validate_he_grade(inputs.get('he_grade'))
    if he_grade.is_valid:
        validated['he_grade'] = int(he_grade.value)
    else:
        errors['he_grade'] = he_grade.message

    if errors:
        logger.info('Input validation failed for fields: %s', ', '.join(sorted(errors)))

    return ValidationResult(is_valid=not errors, errors=errors, validated_inputs=validated)
