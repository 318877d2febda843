"""Resources and the per-application resource registry."""

import re
from typing import Callable, Dict, Optional, Tuple, Type, Union

from resourceful.errors import ConfigurationError
from resourceful.paths import Paths
from resourceful.types import Request

IRREGULARS = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "foot": "feet",
    "tooth": "teeth",
    "mouse": "mice",
}


def pluralize(word: str) -> str:
    """Simple English pluralization.

    Example:
        >>> pluralize("blanket")
        'blankets'
        >>> pluralize("category")
        'categories'
    """
    if word.lower() in IRREGULARS:
        return IRREGULARS[word.lower()]

    if word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    elif word.endswith("y") and word[-2:-1] not in "aeiou":
        return word[:-1] + "ies"
    elif word.endswith("fe"):
        return word[:-2] + "ves"
    else:
        return word + "s"


def snake_case(name: str) -> str:
    """Convert ``BlogEntry`` to ``blog_entry``."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def resource_names(resource: type) -> Tuple[str, str]:
    """Return the (singular, plural) names of a resource class."""
    singular = getattr(resource, "resource_name", None) or snake_case(
        resource.__name__
    )
    plural = getattr(resource, "resource_plural", None) or pluralize(singular)
    return singular, plural


class Resource:
    """Target of dispatched actions, created once per request.

    Subclasses define action methods; matched actions call them with the
    captured parameters as keyword arguments. ``resource_name`` and
    ``resource_plural`` override the names derived from the class name.
    """

    resource_name: Optional[str] = None
    resource_plural: Optional[str] = None

    def __init__(self, request: Request, paths: Optional[Paths] = None) -> None:
        """Initialize resource with the current request."""
        self.request = request
        self.paths = paths

    @property
    def params(self):
        """Return the request parameters."""
        return self.request.params

    @property
    def response(self):
        """Return the response under construction."""
        return self.request.response

    @property
    def singular(self) -> str:
        """Return the singular resource name."""
        return resource_names(type(self))[0]

    @property
    def plural(self) -> str:
        """Return the plural resource name."""
        return resource_names(type(self))[1]

    def redirect(self, location, status: int = 302) -> None:
        """Redirect the client to ``location``."""
        self.request.redirect(location, status)

    def not_found(self, detail: str = "Not Found") -> None:
        """Signal that the requested item does not exist."""
        self.request.not_found(detail)


class ResourceRegistry:
    """Registered resources, their Paths objects and inline actions."""

    def __init__(self, default: Optional[Type[Resource]] = None) -> None:
        """Initialize registry, creating a ``Default`` resource if needed."""
        self.by_name: Dict[str, Type[Resource]] = {}
        self.plurals: Dict[str, Type[Resource]] = {}
        self.paths_of: Dict[type, Paths] = {}
        self.actions: Dict[type, Dict[str, Callable]] = {}
        self.default = self.register(default or type("Default", (Resource,), {}))

    def __contains__(self, resource: type) -> bool:
        """Check if ``resource`` is registered."""
        return resource in self.paths_of

    def register(self, resource: Type[Resource]) -> Type[Resource]:
        """Register a resource class; registering twice is a no-op."""
        if not (isinstance(resource, type) and issubclass(resource, Resource)):
            raise ConfigurationError(f"{resource!r} is not a Resource subclass")
        if resource in self:
            return resource

        singular, plural = resource_names(resource)
        if singular in self.by_name or plural in self.plurals:
            raise ConfigurationError(f"Resource name '{singular}' is already taken")

        parent = next(
            (self.paths_of[base] for base in resource.__mro__[1:] if base in self),
            None,
        )
        self.by_name[singular] = resource
        self.plurals[plural] = resource
        self.paths_of[resource] = Paths(singular, plural, parent)
        self.actions[resource] = {}
        return resource

    def resolve(self, resource: Union[str, Type[Resource], None]) -> Type[Resource]:
        """Return the resource class for a name, a class, or the default."""
        if resource is None:
            return self.default
        if isinstance(resource, str):
            if resource not in self.by_name:
                raise ConfigurationError(f"Unknown resource '{resource}'")
            return self.by_name[resource]
        return self.register(resource)

    def by_singular(self, name: str) -> Optional[Type[Resource]]:
        """Return the resource registered under singular ``name``."""
        return self.by_name.get(name)

    def by_plural(self, name: str) -> Optional[Type[Resource]]:
        """Return the resource registered under plural ``name``."""
        return self.plurals.get(name)

    def paths(self, resource: Union[str, Type[Resource], None] = None) -> Paths:
        """Return the Paths object of a resource."""
        return self.paths_of[self.resolve(resource)]

    def define_action(
        self, resource: Type[Resource], name: str, body: Callable
    ) -> None:
        """Register ``body`` as the action ``name`` of ``resource``."""
        self.actions[self.resolve(resource)][name] = body

    def find_action(self, resource: Type[Resource], name: str) -> Optional[Callable]:
        """Return the inline action ``name`` of resource or its registered bases."""
        for base in resource.__mro__:
            if name in self.actions.get(base, {}):
                return self.actions[base][name]
        return None

    def clear(self) -> None:
        """Forget every resource but the default, with its paths and actions."""
        self.by_name.clear()
        self.plurals.clear()
        self.paths_of.clear()
        self.actions.clear()
        self.register(self.default)
