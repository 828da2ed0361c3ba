import logging
import os
import sys

from flask import Flask, jsonify

# Dodaj ścieżkę do projektu
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import DEBUG, SECRET_KEY, DATABASE_PATH, LOG_VIEWER_USER_IDS, validate_config
from blueprints.comments import comments_bp
from services.account_store import AccountStore
from services.cache_store import SqliteCacheStore
from services.comment_orchestrator import CommentAnalysisOrchestrator
from services.content_store import ContentStore
from services.database_service import DatabaseService

def build_orchestrator(db_path: str = None) -> CommentAnalysisOrchestrator:
    """Domyślne połączenie serwisów: SQLite dla cache, treści i kont"""
    db = DatabaseService(db_path)
    return CommentAnalysisOrchestrator(
        cache_store=SqliteCacheStore(db),
        content_store=ContentStore(db),
        account_store=AccountStore(db),
    )

def create_app(config_overrides: dict = None, orchestrator: CommentAnalysisOrchestrator = None) -> Flask:
    app = Flask(__name__)

    app.config['SECRET_KEY'] = SECRET_KEY
    app.config['DEBUG'] = DEBUG
    app.config['DATABASE_PATH'] = DATABASE_PATH
    app.config['LOG_VIEWER_USER_IDS'] = list(LOG_VIEWER_USER_IDS)
    if config_overrides:
        app.config.update(config_overrides)

    app.extensions['comment_orchestrator'] = orchestrator or build_orchestrator(app.config['DATABASE_PATH'])

    # Rejestracja blueprintów
    app.register_blueprint(comments_bp)

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Nie znaleziono"}), 404

    @app.errorhandler(500)
    def internal_error(error):
        return jsonify({"error": "Wystąpił błąd serwera"}), 500

    return app

if __name__ == '__main__':
    logging.basicConfig(
        level=logging.DEBUG if DEBUG else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    validate_config()
    app = create_app()
    app.run(host='127.0.0.1', port=5000, debug=DEBUG)
