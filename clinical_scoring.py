from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

ORGANS = ("liver", "kidney", "brain", "coagulation", "circulation", "respiratory")

HE_LABELS = ["Grade 0", "Grade 1-2", "Grade 3-4"]

FAILURE_SCORE = 3


@dataclass(frozen=True)
class ScoreResult:
    scores: Dict[str, Optional[int]]
    total_score: int
    organ_failures: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def organ_failure_count(self) -> int:
        return len(self.organ_failures)

    def to_dict(self) -> Dict:
        return {
            'scores': dict(self.scores),
            'total_score': self.total_score,
            'organ_failures': list(self.organ_failures),
            'organ_failure_count': self.organ_failure_count
        }


class ClifOrganScoring:
    """
    CLIF-C OF (Chronic Liver Failure Consortium Organ Failure) scoring.
    Each of the six organ systems is scored 1 (normal) to 3 (organ failure).
    """

    def __init__(self):
        self.organ_criteria = self._initialize_organ_criteria()

    def _initialize_organ_criteria(self) -> Dict:
        """Display names and indicators for each organ system"""
        return {
            'liver': {'name': 'Liver', 'indicator': 'Bilirubin', 'unit': 'mg/dL'},
            'kidney': {'name': 'Kidney', 'indicator': 'Creatinine', 'unit': 'mg/dL'},
            'brain': {'name': 'Brain', 'indicator': 'HE Grade', 'unit': ''},
            'coagulation': {'name': 'Coagulation', 'indicator': 'INR', 'unit': ''},
            'circulation': {'name': 'Circulation', 'indicator': 'MAP', 'unit': 'mmHg'},
            'respiratory': {'name': 'Respiratory', 'indicator': 'PaO2/FiO2', 'unit': ''}
        }

    # ---------- Organ scores ----------

    def score_liver(self, bilirubin: Optional[float]) -> Optional[int]:
        """Bilirubin in mg/dL."""
        if bilirubin is None:
            return None
        if bilirubin < 6:
            return 1
        elif bilirubin < 12:
            return 2
        return 3

    def score_kidney(self, creatinine: Optional[float], rrt: bool = False) -> Optional[int]:
        """Creatinine in mg/dL. Renal replacement therapy always scores 3."""
        if rrt:
            return 3
        if creatinine is None:
            return None
        if creatinine < 2:
            return 1
        elif creatinine < 3.5:
            return 2
        return 3

    def score_brain(self, he_grade: Optional[int]) -> Optional[int]:
        """West-Haven bucket: 0 = none, 1 = grade 1-2, 2 = grade 3-4."""
        if he_grade is None:
            return None
        if he_grade == 0:
            return 1
        elif he_grade == 1:
            return 2
        return 3

    def score_coagulation(self, inr: Optional[float]) -> Optional[int]:
        if inr is None:
            return None
        if inr < 2.0:
            return 1
        elif inr < 2.5:
            return 2
        return 3

    def score_circulation(self, map_mmhg: Optional[float], vasopressors: bool = False) -> Optional[int]:
        """
        Vasopressor use scores 3. Without vasopressors MAP only separates 1 from 2.
        """
        if vasopressors:
            return 3
        if map_mmhg is None:
            return None
        if map_mmhg >= 70:
            return 1
        return 2

    def score_respiratory(self, pf_ratio: Optional[float]) -> Optional[int]:
        if pf_ratio is None:
            return None
        if pf_ratio > 300:
            return 1
        elif pf_ratio > 200:
            return 2
        return 3

    def calculate_all_scores(self, inputs: Dict) -> ScoreResult:
        """Score every organ from a validated input set."""
        scores = {
            'liver': self.score_liver(inputs.get('bilirubin')),
            'kidney': self.score_kidney(inputs.get('creatinine'), inputs.get('rrt', False)),
            'brain': self.score_brain(inputs.get('he_grade')),
            'coagulation': self.score_coagulation(inputs.get('inr')),
            'circulation': self.score_circulation(inputs.get('map'), inputs.get('vasopressors', False)),
            'respiratory': self.score_respiratory(inputs.get('pf_ratio'))
        }
        total_score = sum(s for s in scores.values() if s is not None)
        organ_failures = tuple(organ for organ in ORGANS if scores[organ] == FAILURE_SCORE)
        return ScoreResult(scores=scores, total_score=total_score, organ_failures=organ_failures)

    # ---------- Result cards ----------

    def get_score_status(self, score: Optional[int]) -> Dict[str, str]:
        if score is None:
            return {'status': 'unknown', 'text': 'Not entered', 'color': 'gray'}
        status_map = {1: 'normal', 2: 'warning', 3: 'failure'}
        text_map = {1: 'Normal', 2: 'Caution', 3: 'Failure'}
        color_map = {1: 'green', 2: 'yellow', 3: 'red'}
        return {
            'status': status_map.get(score, 'unknown'),
            'text': text_map.get(score, '-'),
            'color': color_map.get(score, 'gray')
        }

    def _organ_value(self, organ: str, inputs: Dict) -> Tuple[object, str]:
        unit = self.organ_criteria[organ]['unit']
        if organ == 'liver':
            return inputs.get('bilirubin'), unit
        if organ == 'kidney':
            if inputs.get('rrt'):
                return 'RRT', ''
            return inputs.get('creatinine'), unit
        if organ == 'brain':
            he_grade = inputs.get('he_grade')
            if he_grade in (0, 1, 2):
                return HE_LABELS[he_grade], unit
            return HE_LABELS[0], unit
        if organ == 'coagulation':
            return inputs.get('inr'), unit
        if organ == 'circulation':
            if inputs.get('vasopressors'):
                return 'Vasopressors', ''
            return inputs.get('map'), unit
        return inputs.get('pf_ratio'), unit

    def get_organ_details(self, organ: str, score: Optional[int], inputs: Dict) -> Dict:
        status = self.get_score_status(score)
        value, unit = self._organ_value(organ, inputs)
        criteria = self.organ_criteria[organ]
        return {
            'organ': organ,
            'name': criteria['name'],
            'indicator': criteria['indicator'],
            'score': score,
            'status': status['status'],
            'status_text': status['text'],
            'color': status['color'],
            'value': value,
            'unit': unit,
            'is_failure': score == FAILURE_SCORE
        }

    def get_all_organ_details(self, score_result: ScoreResult, inputs: Dict) -> List[Dict]:
        return [self.get_organ_details(organ, score_result.scores.get(organ), inputs) for organ in ORGANS]
