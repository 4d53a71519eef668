"""Template variables for notes created from a mention."""

import re
from datetime import datetime
from typing import Optional

from .config import LinkingSettings


VARIABLE_PATTERN = re.compile(r"{{\s*(?P<name>title|date|time)\s*(?::(?P<format>[^}\n]*))?}}", re.IGNORECASE)

# Moment-style tokens, longest first so "MMMM" is not read as "MM" twice
_TOKENS = [
    ("YYYY", "%Y"), ("YY", "%y"),
    ("MMMM", "%B"), ("MMM", "%b"), ("MM", "%m"), ("M", "{month}"),
    ("DD", "%d"), ("D", "{day}"),
    ("dddd", "%A"), ("ddd", "%a"),
    ("HH", "%H"), ("H", "{hour}"), ("hh", "%I"), ("h", "{hour12}"),
    ("mm", "%M"), ("ss", "%S"),
    ("A", "%p"), ("a", "{ampm}"),
]
_TOKEN_PATTERN = re.compile(r"\[[^\]]*\]|" + "|".join(re.escape(t) for t, _ in _TOKENS))


def format_moment(value: datetime, fmt: str) -> str:
    """
    Format a datetime with moment.js-style tokens.

    Text in square brackets is copied literally, as in moment.
    """
    mapping = dict(_TOKENS)
    unpadded = {
        "{month}": str(value.month),
        "{day}": str(value.day),
        "{hour}": str(value.hour),
        "{hour12}": str(value.hour % 12 or 12),
        "{ampm}": "am" if value.hour < 12 else "pm",
    }

    out = []
    position = 0
    for match in _TOKEN_PATTERN.finditer(fmt):
        out.append(fmt[position:match.start()])
        token = match.group(0)
        if token.startswith("["):
            out.append(token[1:-1])
        else:
            directive = mapping[token]
            out.append(unpadded.get(directive) or value.strftime(directive))
        position = match.end()
    out.append(fmt[position:])
    return "".join(out)


def replace_new_file_vars(
    content: str,
    title: str,
    settings: LinkingSettings,
    now: Optional[datetime] = None,
) -> str:
    """Substitute {{title}}, {{date}} and {{time}} (with optional :format) in a template."""
    now = now or datetime.now()

    def substitute(match: re.Match) -> str:
        name = match.group("name").lower()
        fmt = (match.group("format") or "").strip()
        if name == "title":
            return title
        if name == "date":
            return format_moment(now, fmt or settings.date_format)
        return format_moment(now, fmt or settings.time_format)

    return VARIABLE_PATTERN.sub(substitute, content)
