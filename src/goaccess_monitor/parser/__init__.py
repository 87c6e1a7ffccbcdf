"""Parser package - Converts Nginx log layouts into GoAccess directives.

Parsers do NOT run commands - they only transform text.
"""

from goaccess_monitor.parser.log_format import (
    NGINX_TO_GOACCESS,
    UNKNOWN_FIELD,
    LogFormatTranslator,
    extract_log_formats,
    nginx_to_goaccess,
    select_log_format,
)

__all__ = [
    "LogFormatTranslator",
    "NGINX_TO_GOACCESS",
    "UNKNOWN_FIELD",
    "extract_log_formats",
    "nginx_to_goaccess",
    "select_log_format",
]
