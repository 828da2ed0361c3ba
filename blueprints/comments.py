"""
Blueprint komentarzy - REST API (JSON)
"""
from functools import wraps

from flask import Blueprint, current_app, jsonify, request, session

from services.logger import LoggerService
from utils.validators import validate_analyze_payload, validate_comments_request, validate_platform_filter

comments_bp = Blueprint('comments', __name__, url_prefix='/api')

MAX_LOG_LINES = 1000

logger = LoggerService()

def get_orchestrator():
    return current_app.extensions['comment_orchestrator']

def login_required(view):
    """Wymaga user_id w sesji"""
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not session.get('user_id'):
            return jsonify({"error": "Wymagane zalogowanie"}), 401
        return view(*args, **kwargs)
    return wrapper

@comments_bp.route('/comments')
@login_required
def get_comments():
    """API: Analiza komentarzy (cache lub odświeżenie)"""
    params = {
        'timeRange': request.args.get('timeRange', '24h'),
        'platform': request.args.get('platform', 'all'),
        'refresh': request.args.get('refresh', 'false'),
    }

    is_valid, error_msg = validate_comments_request(params)
    if not is_valid:
        return jsonify({"error": error_msg}), 400

    refresh = params['refresh'].lower() in ('true', '1')

    try:
        result = get_orchestrator().get_comments(
            str(session['user_id']),
            params['platform'],
            params['timeRange'],
            refresh=refresh
        )
        return jsonify(result)
    except Exception as e:
        logger.add_log(f"Błąd API komentarzy: {str(e)}", "ERROR", context="Comments API")
        return jsonify({"error": "Nie udało się pobrać komentarzy"}), 500

@comments_bp.route('/comments/analyze', methods=['POST'])
@login_required
def analyze_comments():
    """API: Klasyfikacja i podsumowanie przekazanych komentarzy"""
    data = request.get_json(silent=True)

    is_valid, error_msg = validate_analyze_payload(data)
    if not is_valid:
        return jsonify({"error": error_msg}), 400

    try:
        return jsonify(get_orchestrator().analyze_comments(data['comments']))
    except Exception as e:
        logger.add_log(f"Błąd analizy komentarzy: {str(e)}", "ERROR", context="Comments API")
        return jsonify({"error": "Nie udało się przeanalizować komentarzy"}), 500

@comments_bp.route('/comments/cache/invalidate', methods=['POST'])
@login_required
def invalidate_cache():
    """API: Usuwa zapisane analizy zalogowanego użytkownika"""
    data = request.get_json(silent=True) or {}
    platform = data.get('platform', 'all')

    is_valid, error_msg = validate_platform_filter(platform)
    if not is_valid:
        return jsonify({"error": error_msg}), 400

    try:
        removed = get_orchestrator().invalidate(str(session['user_id']), platform)
        return jsonify({"success": True, "removed": removed})
    except Exception as e:
        logger.add_log(f"Błąd czyszczenia cache: {str(e)}", "ERROR", context="Comments API")
        return jsonify({"error": str(e)}), 500

@comments_bp.route('/logs')
@login_required
def get_logs():
    """API: Ostatnie logi aplikacji (tylko użytkownicy z LOG_VIEWER_USER_IDS)"""
    if str(session['user_id']) not in current_app.config.get('LOG_VIEWER_USER_IDS', []):
        return jsonify({"error": "Brak dostępu do logów"}), 403

    limit = request.args.get('limit', 100, type=int)
    limit = max(1, min(limit, MAX_LOG_LINES))
    level = request.args.get('level')

    if level:
        logs = logger.get_logs_by_level(level.upper())[-limit:]
    else:
        logs = logger.get_logs(limit)

    return jsonify({"logs": logs})
