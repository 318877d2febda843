"""Application: configuration, logging and the registration API."""

import logging
import sys
from typing import Any, Callable, Dict, List, Optional, Sequence, Type, Union

from resourceful.dispatch import Dispatcher
from resourceful.errors import ConfigurationError
from resourceful.mapping import Action, Binding, ExceptionHandler, Filter, MappingTable
from resourceful.paths import Paths
from resourceful.resources import Resource, ResourceRegistry
from resourceful.routing import Constraints, Descriptors, Template
from resourceful.types import Request

CONSTRAINT_OPTIONS = ("methods", "host", "headers", "params", "when")


def _pop_constraints(kwargs: Dict[str, Any]) -> Constraints:
    options = {key: kwargs.pop(key) for key in CONSTRAINT_OPTIONS if key in kwargs}
    return Constraints(**options)


def _reject_unexpected(func: str, kwargs: Dict[str, Any]) -> None:
    if kwargs:
        raise TypeError(
            f"TypeError: {func}() got unexpected keyword "
            f"arguments: {', '.join(list(kwargs))}"
        )


class Application:
    """Application."""

    FORMAT_STRING = "[%(name)s] - [%(levelname)s] - %(message)s"

    def __init__(
        self,
        name: str,
        default_resource: Optional[Type[Resource]] = None,
        configure_logs: bool = True,
        debug: bool = False,
        synchronize: bool = False,
        default_content_type: str = "text/html",
    ) -> None:
        """Initialize Application object.

        ``debug`` lowers the log level and rebuilds the mapping from the
        registered configuration functions before every request.
        ``synchronize`` runs one request at a time.
        """
        self.name: str = name
        self.debug: bool = debug
        self.synchronize: bool = synchronize
        self.log = logging.getLogger(self.name)
        if configure_logs:
            self._configure_logging()

        self.resources = ResourceRegistry(default_resource)
        self.mapping = MappingTable(self.resources)
        self.configurations: List[Callable[["Application"], Any]] = []
        self.dispatcher = Dispatcher(
            self.mapping,
            self.log,
            synchronize=synchronize,
            reload=self.reload if debug else None,
            default_content_type=default_content_type,
        )

    def _configure_logging(self) -> None:
        if self._already_configured(self.log):
            return

        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(self.FORMAT_STRING)
        handler.setFormatter(formatter)
        self.log.propagate = False
        if self.debug:
            level = logging.DEBUG
        else:
            level = logging.ERROR
        self.log.setLevel(level)
        self.log.addHandler(handler)

    def _already_configured(self, log) -> bool:
        if not log.handlers:
            return False

        for handler in log.handlers:
            if isinstance(handler, logging.StreamHandler):
                if handler.stream == sys.stdout:
                    return True

        return False

    @property
    def default_resource(self) -> Type[Resource]:
        return self.resources.default

    def register(self, resource: Type[Resource]) -> Type[Resource]:
        """Register a resource class. Usable as a class decorator."""
        return self.resources.register(resource)

    def paths(self, resource: Union[str, Type[Resource], None] = None) -> Paths:
        """Return the path generators of a resource (default resource if None)."""
        return self.resources.paths(resource)

    def add_action(
        self, template: Union[str, Template], body: Optional[Callable] = None, **kwargs
    ) -> Action:
        """Register a route.

        ``body`` is called as ``body(resource, **params)``. Without a body the
        route calls the method ``name`` of its resource.
        """
        name = kwargs.pop("name", None)
        resource = kwargs.pop("resource", None)
        match = kwargs.pop("match", None)
        threaded = kwargs.pop("threaded", False)
        constraints = _pop_constraints(kwargs)
        _reject_unexpected("route", kwargs)

        if not isinstance(template, Template):
            template = Template(template, match)
        elif match:
            raise ConfigurationError("match= only applies to template strings")

        action = Action(
            self.resources,
            template,
            constraints,
            Descriptors(threaded=threaded),
            resource=resource,
            name=name,
            body=body,
        )
        self.mapping.add_action(action)
        self.log.debug(f"Registered {action!r} on {action.resource.__name__}")
        return action

    def route(self, template: str, **kwargs) -> Callable:
        """Register route."""

        def _register_view(body):
            self.add_action(template, body, **kwargs)
            return body

        return _register_view

    def path(self, template: str, **kwargs) -> Callable:
        """Register route on a path template."""
        if not template.startswith("/"):
            raise ConfigurationError(f"'{template}' is not a path template")
        return self.route(template, **kwargs)

    def url(self, template: str, **kwargs) -> Callable:
        """Register route on a full URL template."""
        if not Template(template, kwargs.get("match")).is_url:
            raise ConfigurationError(f"'{template}' is not a URL template")
        return self.route(template, **kwargs)

    def get(self, template: str, **kwargs) -> Callable:
        """Register GET route."""
        kwargs["methods"] = ["GET"]
        return self.route(template, **kwargs)

    def post(self, template: str, **kwargs) -> Callable:
        """Register POST route."""
        kwargs["methods"] = ["POST"]
        return self.route(template, **kwargs)

    def put(self, template: str, **kwargs) -> Callable:
        """Register PUT route."""
        kwargs["methods"] = ["PUT"]
        return self.route(template, **kwargs)

    def patch(self, template: str, **kwargs) -> Callable:
        """Register PATCH route."""
        kwargs["methods"] = ["PATCH"]
        return self.route(template, **kwargs)

    def delete(self, template: str, **kwargs) -> Callable:
        """Register DELETE route."""
        kwargs["methods"] = ["DELETE"]
        return self.route(template, **kwargs)

    def options(self, template: str, **kwargs) -> Callable:
        """Register OPTIONS route."""
        kwargs["methods"] = ["OPTIONS"]
        return self.route(template, **kwargs)

    def head(self, template: str, **kwargs) -> Callable:
        """Register HEAD route."""
        kwargs["methods"] = ["HEAD"]
        return self.route(template, **kwargs)

    def add_filter(
        self, kind: str, body: Callable, args: Sequence[Any] = (), **kwargs
    ) -> Filter:
        """Register a before, after or always filter.

        ``body`` is called as ``body(request, *args)``. ``path`` (a template)
        and the constraint options restrict the requests it applies to.
        """
        path = kwargs.pop("path", None)
        match = kwargs.pop("match", None)
        constraints = _pop_constraints(kwargs)
        _reject_unexpected(kind, kwargs)

        template = Template(path, match) if path else None
        filter_ = self.mapping.add_filter(
            kind, Filter(body, args, constraints, template)
        )
        self.log.debug(f"Registered {kind} filter {body!r}")
        return filter_

    def _filter(self, kind: str, args: Sequence[Any], kwargs) -> Callable:
        def _register_filter(body):
            self.add_filter(kind, body, args, **kwargs)
            return body

        return _register_filter

    def before(self, args: Sequence[Any] = (), **kwargs) -> Callable:
        """Register before filter."""
        return self._filter("before", args, kwargs)

    def after(self, args: Sequence[Any] = (), **kwargs) -> Callable:
        """Register after filter."""
        return self._filter("after", args, kwargs)

    def always(self, args: Sequence[Any] = (), **kwargs) -> Callable:
        """Register always filter."""
        return self._filter("always", args, kwargs)

    def wrap(self, args: Sequence[Any] = (), **kwargs) -> Callable:
        """Register the same body as both before and after filter."""

        def _register_filter(body):
            self.add_filter("before", body, args, **dict(kwargs))
            self.add_filter("after", body, args, **dict(kwargs))
            return body

        return _register_filter

    def add_handler(
        self, kind: Type[BaseException], body: Callable, args: Sequence[Any] = ()
    ) -> ExceptionHandler:
        """Register an exception handler.

        ``body`` is called as ``body(request, error, *args)`` and renders the
        error onto ``request.response``.
        """
        handler = self.mapping.add_handler(ExceptionHandler(kind, body, args))
        self.log.debug(f"Registered handler for {kind.__name__}")
        return handler

    def handle(self, kind: Type[BaseException], args: Sequence[Any] = ()) -> Callable:
        """Register exception handler."""

        def _register_handler(body):
            self.add_handler(kind, body, args)
            return body

        return _register_handler

    def clear(self) -> None:
        """Forget every route, filter, handler and non-default resource."""
        self.mapping.clear()

    def resolve(self, request: Request) -> Binding:
        """Return the binding of the first matching route."""
        return self.mapping.resolve(request)

    def configuration(self, func: Callable[["Application"], Any]) -> Callable:
        """Run ``func(app)`` now and again on every reload."""
        self.configurations.append(func)
        func(self)
        return func

    def reload(self) -> None:
        """Rebuild the mapping from the configuration functions.

        Registrations made outside a configuration function do not survive
        a reload. Does nothing when no configuration function is registered.
        """
        if not self.configurations:
            return
        self.log.debug("Reloading mapping")
        self.clear()
        for func in self.configurations:
            func(self)

    def deferred(self, request: Request) -> bool:
        """Check if the transport should run ``request`` on its own thread."""
        return self.dispatcher.deferred(request)

    def __call__(self, request: Request) -> Dict[str, Any]:
        """Dispatch request and return the finished response."""
        return self.dispatcher(request)
