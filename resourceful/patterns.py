"""Regex patterns for template parsing."""

import re

# A whole path segment that is a capture: {name} or {name:regex}
segment_pattern = re.compile(
    r"^\{(?P<name>[a-zA-Z_][a-zA-Z0-9_]*)(:(?P<pattern>.+))?\}$"
)

# Captures embedded anywhere in a URL template; regexes may hold one level of braces
capture_expr = re.compile(
    r"\{(?P<name>[a-zA-Z_][a-zA-Z0-9_]*)(:(?P<pattern>(?:[^{}]|\{[^{}]*\})+))?\}"
)

url_pattern = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")

# What a bare {name} captures inside a URL template
url_part = r"[^/:?#]+"
