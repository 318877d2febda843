"""Route table entries and the mapping table that owns them."""

from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Type

from resourceful.errors import ConfigurationError, NotFound
from resourceful.resources import Resource, ResourceRegistry
from resourceful.routing import Constraints, Descriptors, Template, match
from resourceful.types import Request

FILTER_KINDS = ("before", "after", "always")


class Action:
    """A route: template and constraints bound to a resource action or body."""

    def __init__(
        self,
        registry: ResourceRegistry,
        template: Template,
        constraints: Optional[Constraints] = None,
        descriptors: Optional[Descriptors] = None,
        resource: Any = None,
        name: Optional[str] = None,
        body: Optional[Callable] = None,
    ) -> None:
        """Initialize action and register its path generator and body."""
        if name is None and body is None:
            raise ValueError(f"Unnamed route '{template.source}' needs a body")

        self.registry = registry
        self.template = template
        self.constraints = constraints or Constraints()
        self.descriptors = descriptors or Descriptors()
        self.resource = registry.resolve(resource)
        self.name = name
        self.body = body

        if name:
            registry.paths(self.resource).define(name, template)
            if body is not None:
                registry.define_action(self.resource, name, body)

    def __repr__(self) -> str:
        return f"Action({self.name or '<inline>'}, {self.template.source!r})"

    @property
    def threaded(self) -> bool:
        """Return True if the action wants its own thread."""
        return self.descriptors.threaded

    def bind(self, request: Request) -> Optional["Binding"]:
        """Return a Binding if the request satisfies this action."""
        params = match(request, self.template, self.constraints, self.registry)
        if params is None:
            return None

        resource = self.resource
        if "resource" in params:
            resource = self.registry.by_singular(params.pop("resource"))
        if "resources" in params:
            resource = self.registry.by_plural(params.pop("resources"))
        return Binding(self, params, resource)  # type: ignore

    def call(self, request: Request, resource: Type[Resource], params: Dict) -> Any:
        """Instantiate the resource for this request and run the action."""
        instance = resource(request, self.registry.paths(resource))
        if self.name is None:
            return self.body(instance, **params)  # type: ignore

        handler = self.registry.find_action(resource, self.name) or self.body
        if handler is not None:
            return handler(instance, **params)

        method = getattr(instance, self.name, None)
        if not callable(method):
            raise ConfigurationError(
                f"{resource.__name__} has no action '{self.name}'"
            )
        return method(**params)


class Binding:
    """Result of a successful match, consumed once by the dispatcher."""

    def __init__(
        self, action: Action, params: Dict[str, Any], resource: Type[Resource]
    ) -> None:
        """Initialize binding."""
        self.action = action
        self.params = params
        self.resource = resource

    @property
    def name(self) -> Optional[str]:
        """Return the route name of the matched action."""
        return self.action.name

    @property
    def template(self) -> Template:
        """Return the template of the matched action."""
        return self.action.template

    @property
    def threaded(self) -> bool:
        """Return the threaded flag of the matched action."""
        return self.action.threaded

    def call(self, request: Request) -> Any:
        """Merge captured parameters into the request and run the action."""
        request.params.update(self.params)
        return self.action.call(request, self.resource, self.params)


class Filter:
    """A before, after or always filter with its own applicability test."""

    def __init__(
        self,
        body: Callable,
        args: Sequence[Any] = (),
        constraints: Optional[Constraints] = None,
        template: Optional[Template] = None,
    ) -> None:
        """Initialize filter; ``args`` are bound once, here."""
        self.body = body
        self.args = tuple(args)
        self.constraints = constraints or Constraints()
        self.template = template

    def applies(self, request: Request) -> bool:
        """Check if the filter should run for ``request``."""
        if not self.constraints.satisfy(request):
            return False
        return self.template is None or self.template.match(request) is not None

    def __call__(self, request: Request) -> Any:
        """Run the filter body with its fixed arguments."""
        return self.body(request, *self.args)


class ExceptionHandler:
    """An exception kind paired with the handler that renders it."""

    def __init__(
        self, kind: Type[BaseException], body: Callable, args: Sequence[Any] = ()
    ) -> None:
        """Initialize exception handler."""
        if not (isinstance(kind, type) and issubclass(kind, BaseException)):
            raise ConfigurationError(f"{kind!r} is not an exception class")
        self.kind = kind
        self.body = body
        self.args = tuple(args)

    def handles(self, error: BaseException) -> bool:
        """Check if ``error`` is of this kind or of a subclass of it."""
        return self.kind in type(error).__mro__

    def __call__(self, request: Request, error: BaseException) -> Any:
        """Run the handler body for ``error``."""
        return self.body(request, error, *self.args)


class MappingTable:
    """Ordered actions, filters and exception handlers of one application.

    Built while configuring; read-only while serving.
    """

    def __init__(self, registry: ResourceRegistry) -> None:
        """Initialize an empty mapping table."""
        self.registry = registry
        self.actions: List[Action] = []
        self.filters: Dict[str, List[Filter]] = {kind: [] for kind in FILTER_KINDS}
        self.handlers: List[ExceptionHandler] = []

    def add_action(self, action: Action) -> Action:
        """Append ``action`` to the route table."""
        self.actions.append(action)
        return action

    def add_filter(self, kind: str, filter_: Filter) -> Filter:
        """Append ``filter_`` to the filters of ``kind``."""
        if kind not in self.filters:
            raise ConfigurationError(f"Unknown filter kind '{kind}'")
        self.filters[kind].append(filter_)
        return filter_

    def add_handler(self, handler: ExceptionHandler) -> ExceptionHandler:
        """Append ``handler`` to the exception handlers."""
        self.handlers.append(handler)
        return handler

    def clear(self) -> None:
        """Forget every action, filter and handler."""
        self.actions.clear()
        for filters in self.filters.values():
            filters.clear()
        self.handlers.clear()
        self.registry.clear()

    def resolve(self, request: Request) -> Binding:
        """Return the binding of the first action that matches.

        Raises ``NotFound`` if none does.
        """
        for action in self.actions:
            binding = action.bind(request)
            if binding is not None:
                return binding
        raise NotFound(f"No action for: {request.method} - {request.url}")

    def applicable(self, kind: str, request: Request) -> Iterator[Filter]:
        """Yield the filters of ``kind`` that apply to ``request``."""
        return (f for f in self.filters[kind] if f.applies(request))

    def handler_for(self, error: BaseException) -> Optional[ExceptionHandler]:
        """Return the first handler registered for the error's kind."""
        for handler in self.handlers:
            if handler.handles(error):
                return handler
        return None

    def handle(self, error: BaseException, request: Request) -> bool:
        """Run the handler for ``error``; return False if there is none."""
        handler = self.handler_for(error)
        if handler is None:
            return False
        handler(request, error)
        return True

    def threaded(self, request: Request) -> bool:
        """Check if the action matching ``request`` wants its own thread."""
        try:
            return self.resolve(request).threaded
        except NotFound:
            return False

