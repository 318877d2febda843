"""Route templates, request constraints and pattern matching."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Pattern, Tuple, Union
from urllib.parse import unquote

from resourceful.errors import ConfigurationError
from resourceful.patterns import capture_expr, segment_pattern, url_part, url_pattern
from resourceful.types import Request

RESOURCE_NAMES = ("resource", "resources")

Predicate = Callable[[Request], bool]


class TokenKind(Enum):
    """Kinds of template token."""

    LITERAL = "literal"
    PLACEHOLDER = "placeholder"
    REGEX = "regex"
    RESOURCE = "resource"


@dataclass(frozen=True)
class Token:
    """One template token.

    ``value`` is the literal text for LITERAL tokens and the capture name
    for every other kind.
    """

    kind: TokenKind
    value: str
    pattern: Optional[Pattern] = None

    @property
    def consumes(self) -> bool:
        """Return True if generating this token consumes an argument."""
        return self.kind in (TokenKind.PLACEHOLDER, TokenKind.REGEX)


def _compile(name: str, expr: str) -> Pattern:
    try:
        return re.compile(expr)
    except re.error as err:
        raise ConfigurationError(f"Invalid pattern for '{name}': {err}") from err


def _capture_token(name: str, expr: Optional[str], match: Dict[str, str]) -> Token:
    expr = expr or match.get(name)
    if name in RESOURCE_NAMES:
        if expr:
            raise ConfigurationError(f"'{name}' is reserved and takes no pattern")
        return Token(TokenKind.RESOURCE, name)
    if expr:
        return Token(TokenKind.REGEX, name, _compile(name, expr))
    return Token(TokenKind.PLACEHOLDER, name)


def _check_names(source: str, tokens: Iterable[Token]) -> None:
    names = [t.value for t in tokens if t.kind is not TokenKind.LITERAL]
    if len(names) != len(set(names)):
        raise ConfigurationError(f"Duplicate capture name in '{source}'")


def _unanchor(expr: str) -> str:
    if expr.startswith("^"):
        expr = expr[1:]
    if expr.endswith("$") and not expr.endswith("\\$"):
        expr = expr[:-1]
    return expr


def _capture(token: Token, text: str) -> Optional[str]:
    if token.kind is not TokenKind.REGEX:
        return text
    found = token.pattern.fullmatch(text)  # type: ignore
    if found is None:
        return None
    if found.re.groups and found.group(1) is not None:
        return found.group(1)
    return found.group(0)


def _names_resource(token: Token, text: str, resources) -> bool:
    if resources is None:
        return False
    if token.value == "resource":
        return resources.by_singular(text) is not None
    return resources.by_plural(text) is not None


class Template:
    """Parsed path or URL template.

    Path templates (``/users/{id}``) are split on ``/`` and each segment
    becomes exactly one token. URL templates (``http://{host}:{port}/x``)
    hold captures anywhere and are matched against the whole request URL.
    """

    def __init__(self, source: str, match: Optional[Dict[str, str]] = None) -> None:
        """Parse ``source``; ``match`` maps capture names to regexes."""
        self.source = source
        self.is_url = bool(url_pattern.match(source))
        match = match or {}
        if self.is_url:
            self.tokens = self._parse_url(source, match)
            self.regex: Optional[Pattern] = self._url_regex()
        else:
            self.tokens = self._parse_path(source, match)
            self.regex = None
        _check_names(source, self.tokens)

        unknown = set(match) - {t.value for t in self.tokens if t.consumes}
        if unknown:
            raise ConfigurationError(
                f"match= names not in '{source}': {', '.join(sorted(unknown))}"
            )

    def __repr__(self) -> str:
        return f"Template({self.source!r})"

    @staticmethod
    def _parse_path(source: str, match: Dict[str, str]) -> Tuple[Token, ...]:
        tokens: List[Token] = []
        for segment in source.strip("/").split("/"):
            if not segment:
                continue
            found = segment_pattern.match(segment)
            if found:
                tokens.append(_capture_token(found["name"], found["pattern"], match))
            else:
                tokens.append(Token(TokenKind.LITERAL, segment))
        return tuple(tokens)

    @staticmethod
    def _parse_url(source: str, match: Dict[str, str]) -> Tuple[Token, ...]:
        tokens: List[Token] = []
        position = 0
        for found in capture_expr.finditer(source):
            if found.start() > position:
                literal = source[position : found.start()]
                tokens.append(Token(TokenKind.LITERAL, literal))
            tokens.append(_capture_token(found["name"], found["pattern"], match))
            position = found.end()
        if position < len(source):
            tokens.append(Token(TokenKind.LITERAL, source[position:]))
        return tuple(tokens)

    def _url_regex(self) -> Pattern:
        parts = []
        for token in self.tokens:
            if token.kind is TokenKind.LITERAL:
                parts.append(re.escape(token.value))
            elif token.kind is TokenKind.REGEX:
                expr = _unanchor(token.pattern.pattern)  # type: ignore
                parts.append(f"(?P<{token.value}>{expr})")
            else:
                parts.append(f"(?P<{token.value}>{url_part})")
        return _compile(self.source, "".join(parts))

    @property
    def arity(self) -> int:
        """Return the number of arguments path generation consumes."""
        return sum(1 for token in self.tokens if token.consumes)

    def match(self, request: Request, resources=None) -> Optional[Dict[str, str]]:
        """Return captured parameters, or None if the request does not fit.

        ``resources`` resolves ``{resource}``/``{resources}`` captures to
        registered resource names; without it those tokens never match.
        """
        if self.is_url:
            return self._match_url(request.url, resources)
        return self._match_path(request.path, resources)

    def _match_path(self, path: str, resources) -> Optional[Dict[str, str]]:
        segments = [unquote(s) for s in path.split("/") if s]
        if len(segments) != len(self.tokens):
            return None

        params: Dict[str, str] = {}
        for token, segment in zip(self.tokens, segments):
            if token.kind is TokenKind.LITERAL:
                if segment != token.value:
                    return None
                continue
            if token.kind is TokenKind.RESOURCE:
                if not _names_resource(token, segment, resources):
                    return None
                params[token.value] = segment
                continue
            value = _capture(token, segment)
            if value is None:
                return None
            params[token.value] = value
        return params

    def _match_url(self, url: str, resources) -> Optional[Dict[str, str]]:
        found = self.regex.fullmatch(url)  # type: ignore
        if found is None:
            return None

        params: Dict[str, str] = {}
        for token in self.tokens:
            if token.kind is TokenKind.LITERAL:
                continue
            text = unquote(found.group(token.value))
            if token.kind is TokenKind.RESOURCE:
                if not _names_resource(token, text, resources):
                    return None
                params[token.value] = text
                continue
            value = _capture(token, text)
            if value is None:
                return None
            params[token.value] = value
        return params


class Constraints:
    """Ordered request predicates that must all hold before a template is tried."""

    def __init__(
        self,
        methods: Optional[Union[str, Iterable[str]]] = None,
        host: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
        when: Optional[Union[Predicate, Iterable[Predicate]]] = None,
    ) -> None:
        """Initialize constraints."""
        self.methods: Optional[List[str]] = None
        self.predicates: List[Predicate] = []

        if methods:
            if isinstance(methods, str):
                methods = [methods]
            self.methods = [m.upper() for m in methods]
            allowed = self.methods
            self.predicates.append(lambda request: request.method in allowed)

        if host:
            expected = host.lower()
            self.predicates.append(lambda request: request.host.lower() == expected)

        for key, value in (headers or {}).items():
            self.predicates.append(
                lambda request, k=key.lower(), v=value: request.headers.get(k) == v
            )

        for key, value in (params or {}).items():
            self.predicates.append(
                lambda request, k=key, v=value: request.params.get(k) == v
            )

        if when is not None:
            if callable(when):
                when = [when]
            self.predicates.extend(when)

    def satisfy(self, request: Request) -> bool:
        """Return True if every predicate accepts the request."""
        return all(predicate(request) for predicate in self.predicates)


@dataclass(frozen=True)
class Descriptors:
    """Descriptive flags of an action."""

    threaded: bool = False


def match(
    request: Request,
    template: Template,
    constraints: Constraints,
    resources=None,
) -> Optional[Dict[str, str]]:
    """Match ``request`` against constraints, then the template.

    Returns the captured parameters, or None when either fails.
    """
    if not constraints.satisfy(request):
        return None
    return template.match(request, resources)
