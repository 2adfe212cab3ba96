"""
ACLF (Acute-on-Chronic Liver Failure) grade determination.

ACLF-3: three or more organ failures
ACLF-2: two organ failures
ACLF-1:
  - single kidney failure
  - one other organ failure + mild kidney dysfunction (Cr 1.5-1.9)
  - one other organ failure + mild hepatic encephalopathy (HE 1-2)
  - moderate kidney dysfunction (Cr 2.0-3.4) without organ failure
No ACLF: none of the above
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Optional, Sequence, Tuple

from clinical_scoring import ScoreResult


class ACLFGrade(str, Enum):
    NO_ACLF = 'No ACLF'
    ACLF_1 = 'ACLF-1'
    ACLF_2 = 'ACLF-2'
    ACLF_3 = 'ACLF-3'


class Severity(str, Enum):
    LOW = 'low'
    MODERATE = 'moderate'
    HIGH = 'high'
    CRITICAL = 'critical'


class KidneyStatus(str, Enum):
    FAILURE = 'kidney_failure'
    MODERATE_DYSFUNCTION = 'kidney_dysfunction_moderate'
    MILD_DYSFUNCTION = 'kidney_dysfunction_mild'
    NORMAL = 'kidney_normal'


DEFAULT_COLOR = '#6B7280'

MORTALITY_INFO = MappingProxyType({
    ACLFGrade.NO_ACLF: {'rate': '< 5%', 'severity': Severity.LOW},
    ACLFGrade.ACLF_1: {'rate': '~22%', 'severity': Severity.MODERATE},
    ACLFGrade.ACLF_2: {'rate': '~32%', 'severity': Severity.HIGH},
    ACLFGrade.ACLF_3: {'rate': '> 70%', 'severity': Severity.CRITICAL},
})

SEVERITY_COLORS = MappingProxyType({
    Severity.LOW: '#10B981',
    Severity.MODERATE: '#F59E0B',
    Severity.HIGH: '#EF4444',
    Severity.CRITICAL: '#DC2626',
})

GRADE_COLORS = MappingProxyType({
    ACLFGrade.NO_ACLF: '#10B981',
    ACLFGrade.ACLF_1: '#F59E0B',
    ACLFGrade.ACLF_2: '#EF4444',
    ACLFGrade.ACLF_3: '#DC2626',
})


@dataclass(frozen=True)
class GradeResult:
    grade: ACLFGrade
    rationale: str
    organ_failures: Tuple[str, ...]
    organ_failure_count: int
    mortality_rate: str
    severity: Severity

    def to_dict(self) -> Dict:
        return {
            'grade': self.grade.value,
            'rationale': self.rationale,
            'organ_failures': list(self.organ_failures),
            'organ_failure_count': self.organ_failure_count,
            'mortality_rate': self.mortality_rate,
            'severity': self.severity.value,
        }


def check_kidney_condition(creatinine: Optional[float], rrt: bool) -> KidneyStatus:
    if rrt:
        return KidneyStatus.FAILURE
    if creatinine is None:
        return KidneyStatus.NORMAL
    if creatinine >= 3.5:
        return KidneyStatus.FAILURE
    if creatinine >= 2.0:
        return KidneyStatus.MODERATE_DYSFUNCTION
    if creatinine >= 1.5:
        return KidneyStatus.MILD_DYSFUNCTION
    return KidneyStatus.NORMAL


def _grade(organ_failure_count: int, organ_failures: Sequence[str],
           creatinine: Optional[float], rrt: bool, he_grade: Optional[int]) -> Tuple[ACLFGrade, str]:
    if organ_failure_count >= 3:
        return ACLFGrade.ACLF_3, f'{organ_failure_count} organ failures'

    if organ_failure_count == 2:
        return ACLFGrade.ACLF_2, '2 organ failures'

    kidney = check_kidney_condition(creatinine, rrt)

    if organ_failure_count == 1:
        failed_organ = organ_failures[0]

        if failed_organ == 'kidney':
            return ACLFGrade.ACLF_1, 'Single kidney failure'

        if kidney is KidneyStatus.MILD_DYSFUNCTION:
            return (ACLFGrade.ACLF_1,
                    f'{failed_organ.capitalize()} failure + mild kidney dysfunction (Cr 1.5-1.9)')

        if he_grade == 1 and failed_organ != 'brain':
            return (ACLFGrade.ACLF_1,
                    f'{failed_organ.capitalize()} failure + mild hepatic encephalopathy (HE 1-2)')

        return ACLFGrade.NO_ACLF, f'Single {failed_organ} failure without additional criteria'

    if kidney is KidneyStatus.MODERATE_DYSFUNCTION:
        return ACLFGrade.ACLF_1, 'Moderate kidney dysfunction (Cr 2.0-3.4)'

    return ACLFGrade.NO_ACLF, 'No organ failure criteria met'


def determine_aclf_grade(score_result: ScoreResult, inputs: Dict) -> GradeResult:
    """
    Grade ACLF from organ scores and the raw creatinine, RRT and HE grade values.

    Rules are checked in order and the first match wins. Inputs are expected to
    be validated already.
    """
    organ_failures = tuple(score_result.organ_failures)
    organ_failure_count = score_result.organ_failure_count

    grade, rationale = _grade(
        organ_failure_count,
        organ_failures,
        inputs.get('creatinine'),
        bool(inputs.get('rrt', False)),
        inputs.get('he_grade'),
    )
    mortality = get_mortality_info(grade)
    return GradeResult(
        grade=grade,
        rationale=rationale,
        organ_failures=organ_failures,
        organ_failure_count=organ_failure_count,
        mortality_rate=mortality['rate'],
        severity=mortality['severity'],
    )


def get_mortality_info(grade) -> Dict:
    """28-day mortality band and severity for a grade; unknown grades map to No ACLF."""
    try:
        key = ACLFGrade(grade)
    except ValueError:
        key = ACLFGrade.NO_ACLF
    return dict(MORTALITY_INFO[key])


def get_severity_color(severity) -> str:
    try:
        return SEVERITY_COLORS[Severity(severity)]
    except ValueError:
        return DEFAULT_COLOR


def get_grade_color(grade) -> str:
    try:
        return GRADE_COLORS[ACLFGrade(grade)]
    except ValueError:
        return DEFAULT_COLOR
