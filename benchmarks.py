# benchmarks.py

VALIDATION_RANGES = {
    'bilirubin': {'min': 0.1, 'max': 50, 'unit': 'mg/dL'},
    'creatinine': {'min': 0.1, 'max': 15, 'unit': 'mg/dL'},
    'inr': {'min': 0.5, 'max': 10, 'unit': ''},
    'sbp': {'min': 60, 'max': 250, 'unit': 'mmHg'},
    'dbp': {'min': 30, 'max': 150, 'unit': 'mmHg'},
    'pao2': {'min': 30, 'max': 600, 'unit': 'mmHg'},
    'spo2': {'min': 70, 'max': 100, 'unit': '%'},
    'o2_flow': {'min': 0, 'max': 5, 'unit': 'L/min'},
    'pf_ratio': {'min': 50, 'max': 600, 'unit': ''},
    'he_grade': {'min': 0, 'max': 2, 'unit': ''}
}

HE_OPTIONS = [
    {'value': 0, 'label': 'Grade 0', 'description': 'None'},
    {'value': 1, 'label': 'Grade 1-2', 'description': 'Mild'},
    {'value': 2, 'label': 'Grade 3-4', 'description': 'Severe'}
]

INITIAL_INPUTS = {
    'bilirubin': '',
    'creatinine': '',
    'rrt': False,
    'he_grade': 0,
    'inr': '',
    'sbp': '',
    'dbp': '',
    'vasopressors': False,
    'pao2': '',
    'o2_flow': '',
    'use_spo2': False,
    'spo2': ''
}
