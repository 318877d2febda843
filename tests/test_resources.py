"""Test resources and the resource registry."""

import pytest

from resourceful.errors import ConfigurationError, NotFound, Redirect
from resourceful.resources import (
    Resource,
    ResourceRegistry,
    pluralize,
    resource_names,
    snake_case,
)
from resourceful.routing import Template
from resourceful.types import Request


def test_pluralize():
    """Simple English pluralization."""
    assert pluralize("blanket") == "blankets"
    assert pluralize("category") == "categories"
    assert pluralize("day") == "days"
    assert pluralize("box") == "boxes"
    assert pluralize("knife") == "knives"
    assert pluralize("person") == "people"


def test_resource_names():
    """Names derive from the class name unless overridden."""

    class BlogEntry(Resource):
        pass

    class Goose(Resource):
        resource_plural = "geese"

    class Thing(Resource):
        resource_name = "item"

    assert snake_case("BlogEntry") == "blog_entry"
    assert resource_names(BlogEntry) == ("blog_entry", "blog_entries")
    assert resource_names(Goose) == ("goose", "geese")
    assert resource_names(Thing) == ("item", "items")


def test_registry_default():
    """A Default resource is created when none is given."""
    registry = ResourceRegistry()
    assert registry.default.__name__ == "Default"
    assert issubclass(registry.default, Resource)
    assert registry.resolve(None) is registry.default
    assert registry.by_singular("default") is registry.default
    assert registry.by_plural("defaults") is registry.default


def test_registry_custom_default():
    """An explicit default resource is registered as such."""

    class Site(Resource):
        pass

    registry = ResourceRegistry(Site)
    assert registry.default is Site
    assert registry.resolve("site") is Site


def test_registry_resolve(registry, blanket):
    """Resolve names and classes, reject unknown names."""
    assert registry.resolve("blanket") is blanket
    assert registry.resolve(blanket) is blanket
    with pytest.raises(ConfigurationError):
        registry.resolve("smurf")


def test_registry_register_on_resolve(registry):
    """Resolving an unregistered class registers it."""

    class Smurf(Resource):
        pass

    assert Smurf not in registry
    assert registry.resolve(Smurf) is Smurf
    assert Smurf in registry
    assert registry.by_plural("smurfs") is Smurf


def test_registry_register_errors(registry, blanket):
    """Only distinct Resource subclasses register."""
    with pytest.raises(ConfigurationError):
        registry.register(object)  # type: ignore

    Other = type("Blanket", (Resource,), {})
    with pytest.raises(ConfigurationError):
        registry.register(Other)

    assert registry.register(blanket) is blanket


def test_registry_paths_inherit(registry, blanket):
    """Paths of a subclass fall back to the registered base's Paths."""

    class Quilt(blanket):
        pass

    registry.register(Quilt)
    assert registry.paths(Quilt).parent is registry.paths(blanket)
    assert registry.paths(blanket).parent is None


def test_registry_actions(registry, blanket):
    """Inline actions are looked up along the class hierarchy."""

    class Quilt(blanket):
        pass

    registry.register(Quilt)

    def fold(resource):
        return "folded"

    registry.define_action(blanket, "fold", fold)
    assert registry.find_action(blanket, "fold") is fold
    assert registry.find_action(Quilt, "fold") is fold
    assert registry.find_action(registry.default, "fold") is None

    registry.clear()
    assert registry.find_action(blanket, "fold") is None


def test_registry_clear(registry, blanket):
    """clear keeps only the default resource; names can be taken again."""
    default = registry.default
    registry.paths().define("home", Template("/"))
    registry.clear()

    assert blanket not in registry
    assert registry.by_singular("blanket") is None
    assert registry.by_plural("blankets") is None
    assert registry.default is default
    assert registry.by_singular("default") is default
    assert "home" not in registry.paths()

    Blanket = type("Blanket", (Resource,), {})
    assert registry.register(Blanket) is Blanket
    assert registry.by_singular("blanket") is Blanket


def test_resource_helpers(registry, blanket):
    """Resources expose the request, params, names and signals."""
    request = Request.build("GET", "/blanket?color=red")
    resource = blanket(request, registry.paths(blanket))

    assert resource.request is request
    assert resource.params == {"color": "red"}
    assert resource.response is request.response
    assert resource.singular == "blanket"
    assert resource.plural == "blankets"
    assert resource.paths is registry.paths(blanket)

    with pytest.raises(Redirect) as err:
        resource.redirect("/elsewhere", 301)
    assert err.value.status == 301

    with pytest.raises(NotFound) as err:
        resource.not_found("gone")
    assert err.value.detail == "gone"
