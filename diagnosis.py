import logging
from typing import Dict, Optional, Tuple

from aclf_grading import determine_aclf_grade, get_grade_color, get_severity_color
from clinical_scoring import ClifOrganScoring
from validation import ValidationResult, get_spo2_warning, validate_all_inputs

logger = logging.getLogger(__name__)


def run_diagnosis(raw_inputs: Dict,
                  scorer: Optional[ClifOrganScoring] = None) -> Tuple[ValidationResult, Optional[Dict]]:
    """
    Validate raw inputs, score every organ and grade ACLF.

    Returns the validation result and, when the inputs are valid, the full
    diagnosis record. Scoring is skipped entirely on validation failure.
    """
    scorer = scorer or ClifOrganScoring()

    validation = validate_all_inputs(raw_inputs)
    if not validation.is_valid:
        return validation, None

    inputs = dict(validation.validated_inputs)
    score_result = scorer.calculate_all_scores(inputs)
    grade_result = determine_aclf_grade(score_result, inputs)

    diagnosis = {
        'inputs': inputs,
        **score_result.to_dict(),
        **grade_result.to_dict(),
        'severity_color': get_severity_color(grade_result.severity),
        'grade_color': get_grade_color(grade_result.grade),
        'organs': scorer.get_all_organ_details(score_result, inputs),
        'spo2_warning': get_spo2_warning(inputs.get('spo2'))
    }
    logger.info('Diagnosis: %s (%s), total score %d',
                diagnosis['grade'], diagnosis['rationale'], diagnosis['total_score'])
    return validation, diagnosis
