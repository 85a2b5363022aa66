import json
import shutil
import subprocess

import pytest
from rdflib import Graph, Literal, Namespace
from rdflib.namespace import RDF, XSD

from exonto.analyzer.nodes import Composite, Leaf, Symbol
from exonto.builders import Context

BASE = "https://example.org/code#"
EX = Namespace("http://example.org/")


def aliases(*parts):
    return Composite("__aliases__", {}, tuple(Leaf(Symbol(p)) for p in parts))


def defmodule(name, *body, line=1):
    return Composite("defmodule", {"line": line}, (aliases(*name.split(".")), Composite("__block__", {}, body)))


def moduledoc(text):
    return Composite("@", {}, (Composite("moduledoc", {}, (Leaf(text),)),))


def tree_json(node):
    from exonto.analyzer.nodes import to_json

    return json.dumps(to_json(node))


@pytest.fixture
def context():
    return Context(base_iri=BASE)


@pytest.fixture
def file_context():
    return Context(base_iri=BASE, file_path="lib/my_app.ex")


@pytest.fixture
def nested_modules_tree():
    # Outer1 { Inner1 }, Outer2 { Inner2 }
    return Composite(
        "__block__",
        {},
        (
            defmodule("Outer1", moduledoc("First outer"), defmodule("Inner1", line=3), line=1),
            defmodule("Outer2", defmodule("Inner2", line=8), line=6),
        ),
    )


@pytest.fixture
def person_graph():
    g = Graph()
    g.add((EX.alice, RDF.type, EX.Person))
    g.add((EX.alice, EX.name, Literal("Alice", datatype=XSD.string)))
    g.add((EX.alice, EX.age, Literal(30, datatype=XSD.integer)))
    g.add((EX.bob, RDF.type, EX.Person))
    g.add((EX.bob, EX.age, Literal("old", datatype=XSD.string)))
    return g


@pytest.fixture
def mix_project(tmp_path):
    """A Mix project whose sources are JSON tree dumps."""
    (tmp_path / "mix.exs").write_text(
        'defmodule MyApp.MixProject do\n  use Mix.Project\n\n'
        '  def project do\n    [app: :my_app, version: "0.3.1"]\n  end\nend\n'
    )
    lib = tmp_path / "lib"
    lib.mkdir()
    (lib / "my_app.ex.json").write_text(tree_json(defmodule("MyApp", moduledoc("Main"), defmodule("Worker", line=4))))
    (lib / "other.ex.json").write_text(tree_json(defmodule("MyApp.Other")))
    test_dir = tmp_path / "test"
    test_dir.mkdir()
    (test_dir / "my_app_test.exs.json").write_text(tree_json(defmodule("MyAppTest")))
    return tmp_path


@pytest.fixture
def create_file_helper():
    def _create(root, rel_path, content):
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _create


@pytest.fixture
def temp_git_repo(tmp_path):
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    repo = tmp_path / "repo"
    repo.mkdir()
    subprocess.run(["git", "init", "-q"], cwd=repo, check=True)
    subprocess.run(["git", "config", "user.email", "dev@example.org"], cwd=repo, check=True)
    subprocess.run(["git", "config", "user.name", "Dev"], cwd=repo, check=True)
    return repo
