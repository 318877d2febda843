"""Test reverse path generation."""

import pytest

from resourceful.errors import GenerationError
from resourceful.paths import Paths
from resourceful.routing import Template
from resourceful.types import Request


@pytest.fixture
def paths():
    """Paths of a 'blanket' resource."""
    return Paths("blanket", "blankets")


def test_generate_literal_and_placeholders(paths):
    """Placeholders consume arguments in order, literals consume none."""
    paths.define("show", Template("/users/{name}/posts/{id:[0-9]+}"))
    assert paths.generate("show", "bob", 7) == "/users/bob/posts/7"


def test_generate_resource_tokens(paths):
    """Resource tokens emit the resource names without consuming arguments."""
    paths.define("list", Template("/{resources}"))
    paths.define("show", Template("/{resource}/{id}"))
    assert paths.generate("list") == "/blankets"
    assert paths.generate("show", 3) == "/blanket/3"


def test_generate_query_string(paths):
    """A trailing mapping becomes the query string."""
    paths.define("show", Template("/entries/{id}"))
    assert paths.generate("show", 1, {"page": 2, "sort": "asc"}) == (
        "/entries/1?page=2&sort=asc"
    )
    assert paths.generate("show", 1, {}) == "/entries/1"


def test_generate_argument_count(paths):
    """Too few or too many scalar arguments is an error."""
    paths.define("show", Template("/entries/{id}/{slug}"))
    with pytest.raises(GenerationError):
        paths.generate("show", 1)
    with pytest.raises(GenerationError):
        paths.generate("show", 1, {"page": 2})
    with pytest.raises(GenerationError):
        paths.generate("show", 1, "a", "b")
    with pytest.raises(ValueError):
        paths.generate("show")


def test_generate_url_template(paths):
    """URL templates are joined without separators."""
    template = Template("http://localhost:{port}/port", match={"port": r"\d+"})
    paths.define("port", template)
    assert paths.generate("port", 3000) == "http://localhost:3000/port"


def test_generate_root(paths):
    """The root template generates '/'."""
    paths.define("home", Template("/"))
    assert paths.generate("home") == "/"
    assert paths.generate("home", {"q": "a b"}) == "/?q=a+b"


def test_generate_unknown(paths):
    """Unknown names raise KeyError."""
    with pytest.raises(KeyError):
        paths.generate("nope")


def test_define_duplicate(paths):
    """A name is defined once per Paths object."""
    paths.define("show", Template("/a"))
    with pytest.raises(ValueError):
        paths.define("show", Template("/b"))


def test_parent_fallback():
    """Lookups fall back to the parent Paths, using the child's names."""
    parent = Paths("default", "defaults")
    parent.define("list", Template("/{resources}"))
    child = Paths("blanket", "blankets", parent)

    assert "list" in child
    assert "list" not in Paths("other", "others")
    assert child.generate("list") == "/blankets"

    child.define("list", Template("/all/{resources}"))
    assert child.generate("list") == "/all/blankets"
    assert parent.generate("list") == "/defaults"


def test_clear(paths):
    """clear drops every generator."""
    paths.define("show", Template("/a"))
    paths.clear()
    assert "show" not in paths


@pytest.mark.parametrize(
    "source,args",
    [
        ("/param/{value}", ["elephant"]),
        ("/users/{name}/posts/{id:[0-9]+}", ["bob smith", "42"]),
        ("/files/{path}", ["a/b"]),
    ],
)
def test_generate_then_match(paths, source, args):
    """Generated paths match their template and capture the same values."""
    template = Template(source)
    paths.define("route", template)
    generated = paths.generate("route", *args)

    params = template.match(Request.build("GET", generated))
    captured = [t.value for t in template.tokens if t.consumes]
    assert [params[name] for name in captured] == args
