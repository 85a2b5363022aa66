import pytest
from rdflib import URIRef

from exonto import iri as IRI

BASE = "https://example.org/code#"


def test_escape_name_percent_encodes_reserved_characters():
    assert IRI.escape_name("valid?") == "valid%3F"
    assert IRI.escape_name("|>") == "%7C%3E"
    assert IRI.escape_name("Elixir.MyApp.Users") == "MyApp.Users"
    assert IRI.unescape_name("valid%3F") == "valid?"


def test_escape_name_encodes_utf8_bytes():
    assert IRI.escape_name("é") == "%C3%A9"


def test_function_and_descendants():
    fn = IRI.for_function(BASE, "MyApp.Users", "get_user", 1)
    clause = IRI.for_clause(fn, 0)
    param = IRI.for_parameter(clause, 0)

    assert isinstance(fn, URIRef)
    assert fn == URIRef(BASE + "MyApp.Users/get_user/1")
    assert clause == URIRef(BASE + "MyApp.Users/get_user/1/clause/0")
    assert param == URIRef(BASE + "MyApp.Users/get_user/1/clause/0/param/0")


def test_source_file_and_location():
    file_iri = IRI.for_source_file(BASE, "lib\\my app.ex")
    assert file_iri == URIRef(BASE + "file/lib/my%20app.ex")
    assert IRI.for_source_location(file_iri, 10, 25) == URIRef(BASE + "file/lib/my%20app.ex/L10-25")


def test_repository_and_commit_are_deterministic():
    repo = IRI.for_repository(BASE, "https://github.com/o/r")
    assert repo == IRI.for_repository(BASE, "https://github.com/o/r")
    assert repo != IRI.for_repository(BASE, "https://github.com/o/other")
    digest = str(repo).rsplit("/", 1)[-1]
    assert len(digest) == 8
    assert IRI.for_commit(repo, "abc123") == URIRef(f"{repo}/commit/abc123")


def test_scoped_generators():
    module = IRI.for_module(BASE, "MyApp.Sup")
    assert IRI.for_anonymous_function(module, 2) == URIRef(BASE + "MyApp.Sup/anon/2")
    assert IRI.for_struct_field(module, "name?") == URIRef(BASE + "MyApp.Sup/field/name%3F")
    assert IRI.for_child_spec(module, "MyApp.Worker", 0) == URIRef(BASE + "MyApp.Sup/child/MyApp.Worker/0")
    assert IRI.for_supervision_tree(BASE, "my_app") == URIRef(BASE + "tree/my_app")
    quote = IRI.for_quote(BASE, "MyApp.Macros", 1)
    assert quote == URIRef(BASE + "MyApp.Macros/quote/1")
    assert IRI.for_unquote(quote, 0) == URIRef(BASE + "MyApp.Macros/quote/1/unquote/0")
    assert IRI.for_hygiene_violation(quote, 3) == URIRef(BASE + "MyApp.Macros/quote/1/hygiene/3")


def test_distinct_roles_never_collide():
    module = IRI.for_module(BASE, "MyApp")
    iris = {
        IRI.for_anonymous_function(module, 0),
        IRI.for_struct_field(module, "0"),
        IRI.for_child_spec(module, "0", 0),
        IRI.for_quote(BASE, "MyApp", 0),
    }
    assert len(iris) == 4


def test_parse_recognizes_every_pattern():
    fn = IRI.for_function(BASE, "MyApp.Users", "valid?", 2)
    assert IRI.parse(fn) == {
        "type": "function",
        "base_iri": BASE,
        "module": "MyApp.Users",
        "function": "valid?",
        "arity": 2,
    }
    assert IRI.parse(IRI.for_module(BASE, "MyApp"))["type"] == "module"

    param = IRI.parse(IRI.for_parameter(IRI.for_clause(fn, 1), 0))
    assert param["type"] == "parameter"
    assert (param["clause"], param["parameter"], param["function"]) == (1, 0, "valid?")

    clause = IRI.parse(IRI.for_clause(fn, 1))
    assert (clause["type"], clause["arity"], clause["clause"]) == ("clause", 2, 1)

    location = IRI.parse(IRI.for_source_location(IRI.for_source_file(BASE, "lib/a.ex"), 3, 9))
    assert location == {"type": "location", "start_line": 3, "end_line": 9, "base_iri": BASE, "path": "lib/a.ex"}

    repo = IRI.for_repository(BASE, "https://github.com/o/r")
    assert IRI.parse(repo)["type"] == "repository"
    assert IRI.parse(IRI.for_commit(repo, "abc123"))["sha"] == "abc123"
    assert IRI.parse(IRI.for_source_file(BASE, "lib/a.ex"))["path"] == "lib/a.ex"


def test_parse_unknown_pattern_raises():
    with pytest.raises(ValueError):
        IRI.parse("https://example.org/nothing-here")


def test_module_and_function_from_iri():
    fn = IRI.for_function(BASE, "MyApp", "run", 0)
    assert IRI.module_from_iri(fn) == "MyApp"
    assert IRI.function_from_iri(fn) == ("MyApp", "run", 0)
    assert IRI.function_from_iri(IRI.for_module(BASE, "MyApp")) is None
    assert IRI.module_from_iri("not an iri") is None


def test_is_valid():
    assert IRI.is_valid(BASE + "MyApp")
    assert not IRI.is_valid("no scheme here")
    assert not IRI.is_valid(None)
