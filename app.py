import os
import logging

from flask import Flask, request, jsonify, current_app

from benchmarks import VALIDATION_RANGES, HE_OPTIONS, INITIAL_INPUTS
from clinical_scoring import ClifOrganScoring
from config import config
from diagnosis import run_diagnosis
from history import DatabaseStorage, DiagnosisHistory
from models import db
from validation import as_flag


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

organ_scorer = ClifOrganScoring()
logger.info("Clinical scoring system initialized successfully")


# =====================================================
# APP INITIALIZATION
# =====================================================
def create_app(config_name=None, history_storage=None):
    app = Flask(__name__)

    config_name = config_name or os.environ.get('FLASK_ENV', 'development')
    app.config.from_object(config[config_name])
    app.json.sort_keys = False

    db.init_app(app)
    with app.app_context():
        db.create_all()

    app.extensions['diagnosis_history'] = DiagnosisHistory(
        history_storage or DatabaseStorage(db),
        key=app.config['HISTORY_STORAGE_KEY'],
        max_entries=app.config['HISTORY_MAX_ENTRIES']
    )

    register_routes(app)
    register_error_handlers(app)
    logger.info("CLIF-C OF app created with '%s' config", config_name)
    return app


def get_history():
    return current_app.extensions['diagnosis_history']


def _request_inputs():
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


# =====================================================
# ROUTES
# =====================================================
def register_routes(app):

    @app.route('/api/form')
    def form_config():
        return jsonify({
            'ranges': VALIDATION_RANGES,
            'he_options': HE_OPTIONS,
            'initial_inputs': INITIAL_INPUTS
        })

    @app.route('/api/diagnosis', methods=['POST'])
    def diagnosis():
        raw_inputs = _request_inputs()
        validation, result = run_diagnosis(raw_inputs, organ_scorer)

        if not validation.is_valid:
            return jsonify({'is_valid': False, 'errors': validation.errors}), 400

        if as_flag(raw_inputs.get('save', request.args.get('save'))):
            entry = get_history().add(result)
            return jsonify(entry), 201

        return jsonify(result)

    @app.route('/api/history', methods=['GET'])
    def history_list():
        return jsonify(get_history().entries())

    @app.route('/api/history', methods=['DELETE'])
    def history_clear():
        get_history().clear()
        return jsonify([])

    @app.route('/api/history/<int:entry_id>', methods=['GET'])
    def history_entry(entry_id):
        entry = get_history().load_by_id(entry_id)
        if entry is None:
            return jsonify({'error': f'History entry {entry_id} not found'}), 404
        return jsonify(entry)

    @app.route('/api/history/<int:entry_id>', methods=['DELETE'])
    def history_remove(entry_id):
        history = get_history()
        history.remove(entry_id)
        return jsonify(history.entries())


def register_error_handlers(app):

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'error': 'Method not allowed'}), 405


# =====================================================
# DB INIT
# =====================================================
if __name__ == '__main__':
    create_app().run(debug=True)
