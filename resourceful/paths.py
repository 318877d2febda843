"""Reverse path generation."""

from collections.abc import Mapping
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlencode

from resourceful.errors import GenerationError
from resourceful.routing import Template, Token, TokenKind


class Paths:
    """Named path generators of one resource.

    Holds no matching state. Lookups fall back to ``parent``, the Paths of
    the nearest registered base resource.
    """

    def __init__(
        self, singular: str, plural: str, parent: Optional["Paths"] = None
    ) -> None:
        """Initialize Paths object."""
        self.singular = singular
        self.plural = plural
        self.parent = parent
        self.templates: Dict[str, Template] = {}

    def __contains__(self, name: str) -> bool:
        """Check if a generator is defined here or on a parent."""
        return self.lookup(name) is not None

    def define(self, name: str, template: Template) -> None:
        """Register the generator ``name``."""
        if name in self.templates:
            raise ValueError(
                f'Duplicate route name detected: "{name}" on {self.singular}'
            )
        self.templates[name] = template

    def lookup(self, name: str) -> Optional[Template]:
        """Return the template registered as ``name``."""
        paths: Optional[Paths] = self
        while paths is not None:
            if name in paths.templates:
                return paths.templates[name]
            paths = paths.parent
        return None

    def clear(self) -> None:
        """Drop every generator defined on this object."""
        self.templates.clear()

    def generate(self, name: str, *args: Any) -> str:
        """Build the path or URL of route ``name`` from ``args``.

        A trailing mapping is rendered as the query string.
        """
        template = self.lookup(name)
        if template is None:
            raise KeyError(f"No path named '{name}' for {self.singular}")

        values = list(args)
        query = values.pop() if values and isinstance(values[-1], Mapping) else None
        if len(values) != template.arity:
            raise GenerationError(
                f"'{name}' takes {template.arity} argument(s), {len(values)} given"
            )

        parts = [self._emit(token, values) for token in template.tokens]
        if template.is_url:
            path = "".join(parts)
        else:
            path = "/" + "/".join(parts)

        if query:
            path += "?" + urlencode(query)
        return path

    def _emit(self, token: Token, values: List[Any]) -> str:
        if token.kind is TokenKind.LITERAL:
            return token.value
        if token.kind is TokenKind.RESOURCE:
            return self.singular if token.value == "resource" else self.plural
        # the token's regex is not reapplied
        return quote(str(values.pop(0)), safe="")
