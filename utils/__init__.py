from .helpers import utc_now, parse_timestamp, to_iso, truncate_text, timestamp_sort_key
from .validators import validate_comments_request, validate_platform_filter, validate_analyze_payload

__all__ = ['utc_now', 'parse_timestamp', 'to_iso', 'truncate_text', 'timestamp_sort_key',
           'validate_comments_request', 'validate_platform_filter', 'validate_analyze_payload']
