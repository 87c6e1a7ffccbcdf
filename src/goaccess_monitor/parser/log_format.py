"""Nginx log_format -> GoAccess log-format translation.

Converts an Nginx access-log layout (``$remote_addr - [$time_local] ...``)
into the percent-directive syntax GoAccess expects in its ``log-format``
option. Translation is a pure string function: no I/O, no shared mutable
state, safe to call from anywhere.

IMPORTANT DESIGN NOTES:
1. Each ``$name`` / ``${name}`` reference is tokenized as a whole, then looked
   up once. ``$hostname`` is never half-matched as ``$host``.
2. Unknown lowercase/underscore variables degrade to ``%^`` (skip field).
3. Variables with uppercase letters or digits are left untouched.
"""

import re

from goaccess_monitor.errors import ValidationError

UNKNOWN_FIELD = "%^"

# Nginx variable (no sigil) -> GoAccess directive. Order is the display order
# used in help output; lookups go through a dict.
NGINX_TO_GOACCESS: tuple[tuple[str, str], ...] = (
    ("time_local", "%d:%t %^"),
    ("host", "%v"),
    ("http_host", "%v"),
    ("remote_addr", "%h"),
    ("request_time", "%T"),
    ("request_method", "%m"),
    ("request_uri", "%U"),
    ("server_protocol", "%H"),
    ("request", "%r"),
    ("status", "%s"),
    ("body_bytes_sent", "%b"),
    ("bytes_sent", "%b"),
    ("http_referer", "%R"),
    ("http_user_agent", "%u"),
    ("http_x_forwarded_for", UNKNOWN_FIELD),
)

# Nginx's predefined format, available without a log_format directive.
NGINX_COMBINED = (
    '$remote_addr - $remote_user [$time_local] "$request" '
    '$status $body_bytes_sent "$http_referer" "$http_user_agent"'
)


class LogFormatTranslator:
    """Translate Nginx log_format strings into GoAccess log-format strings.

    Example:
        >>> LogFormatTranslator().translate('$remote_addr "$request"')
        '%h "%r"'
    """

    # ${name} or $name, consuming the full Nginx identifier
    REFERENCE_RE = re.compile(r"\$\{([A-Za-z0-9_]+)\}|\$([A-Za-z0-9_]+)")

    # Identifiers eligible for the %^ fallback
    FALLBACK_NAME_RE = re.compile(r"[a-z_]+")

    def __init__(self, mapping: tuple[tuple[str, str], ...] = NGINX_TO_GOACCESS) -> None:
        self.mapping = mapping
        self._lookup = dict(mapping)

    def translate(self, log_format: str) -> str:
        """Return the GoAccess equivalent of an Nginx log format.

        Literal text is preserved byte for byte. Never raises.
        """
        return self.REFERENCE_RE.sub(self._replace, log_format)

    def unmapped_variables(self, log_format: str) -> list[str]:
        """List variables that will be skipped (%^) because they have no mapping."""
        names: list[str] = []
        for match in self.REFERENCE_RE.finditer(log_format):
            name = match.group(1) or match.group(2)
            if name in self._lookup or name in names:
                continue
            if self.FALLBACK_NAME_RE.fullmatch(name):
                names.append(name)
        return names

    def _replace(self, match: re.Match) -> str:
        name = match.group(1) or match.group(2)
        directive = self._lookup.get(name)
        if directive is not None:
            return directive
        if self.FALLBACK_NAME_RE.fullmatch(name):
            return UNKNOWN_FIELD
        return match.group(0)


_default_translator = LogFormatTranslator()


def nginx_to_goaccess(log_format: str) -> str:
    """Translate with the default variable table."""
    return _default_translator.translate(log_format)


# log_format <name> [escape=default|json|none] 'segment' "segment" ...;
DIRECTIVE_START_RE = re.compile(r"^[ \t]*log_format[ \t]+([^\s;]+)", re.MULTILINE)
SEGMENT_RE = re.compile(r"""\s*(?:'((?:[^'\\]|\\.)*)'|"((?:[^"\\]|\\.)*)"|([^\s;'"]+))""", re.DOTALL)
TERMINATOR_RE = re.compile(r"\s*;")
QUOTE_ESCAPE_RE = re.compile(r"""\\(["'\\])""")


def extract_log_formats(config_text: str) -> dict[str, str]:
    """Collect ``log_format`` directives from Nginx configuration text.

    Quoted segments spread across several lines are concatenated the way
    Nginx does it. Unterminated directives are ignored.

    Args:
        config_text: Contents of nginx.conf (or ``nginx -T`` output).

    Returns:
        Mapping of format name to the joined format string, in file order.
    """
    text = "\n".join(
        line for line in config_text.splitlines() if not line.lstrip().startswith("#")
    )

    formats: dict[str, str] = {}
    for start in DIRECTIVE_START_RE.finditer(text):
        name = start.group(1)
        pos = start.end()
        parts: list[str] = []
        terminated = False

        while True:
            end = TERMINATOR_RE.match(text, pos)
            if end:
                terminated = True
                break
            segment = SEGMENT_RE.match(text, pos)
            if not segment:
                break
            pos = segment.end()
            single, double, bare = segment.groups()
            if bare is not None:
                if not parts and bare.startswith("escape="):
                    continue
                parts.append(bare)
            else:
                quoted = single if single is not None else double
                parts.append(QUOTE_ESCAPE_RE.sub(r"\1", quoted))

        if terminated and parts:
            formats[name] = "".join(parts)

    return formats


def select_log_format(config_text: str, name: str | None = None) -> str:
    """Pick one log_format from Nginx configuration text.

    Nginx's built-in ``combined`` format is always available. Without a
    ``name`` the first format defined in the file wins.

    Raises:
        ValidationError: If ``name`` is not defined.
    """
    formats = extract_log_formats(config_text)
    formats.setdefault("combined", NGINX_COMBINED)
    if name is None:
        return next(iter(formats.values()))
    if name not in formats:
        raise ValidationError(f"log_format '{name}' not found")
    return formats[name]
