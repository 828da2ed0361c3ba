from models.analysis_cache_entry import MAX_CACHED_COMMENTS, PLATFORM_FILTERS, TIME_RANGES

def validate_comments_request(data: dict) -> tuple[bool, str]:
    """Waliduje parametry zapytania o komentarze"""
    time_range = data.get('timeRange', '24h')
    platform = data.get('platform', 'all')
    refresh = str(data.get('refresh', 'false')).lower()

    if time_range not in TIME_RANGES:
        return False, f"Nieprawidłowy zakres czasu (dozwolone: {', '.join(TIME_RANGES)})"

    if platform not in PLATFORM_FILTERS:
        return False, f"Nieprawidłowa platforma (dozwolone: {', '.join(PLATFORM_FILTERS)})"

    if refresh not in ('true', 'false', '1', '0'):
        return False, "Parametr refresh musi mieć wartość true lub false"

    return True, ""

def validate_platform_filter(platform: str) -> tuple[bool, str]:
    """Waliduje filtr platformy"""
    if platform not in PLATFORM_FILTERS:
        return False, f"Nieprawidłowa platforma (dozwolone: {', '.join(PLATFORM_FILTERS)})"
    return True, ""

def validate_analyze_payload(data) -> tuple[bool, str]:
    """Waliduje listę komentarzy do analizy ad-hoc"""
    if not isinstance(data, dict):
        return False, "Wymagany JSON z polem comments"

    comments = data.get('comments')
    if not isinstance(comments, list):
        return False, "Pole comments musi być listą"

    if len(comments) > MAX_CACHED_COMMENTS:
        return False, f"Maksymalnie {MAX_CACHED_COMMENTS} komentarzy w jednym zapytaniu"

    for idx, comment in enumerate(comments):
        if not isinstance(comment, dict) or not comment.get('text'):
            return False, f"Komentarz {idx} nie ma pola text"

    return True, ""
