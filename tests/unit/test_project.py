import json
from unittest.mock import patch

import pytest
from rdflib import Literal
from rdflib.namespace import RDF, XSD

from exonto import iri as IRI
from exonto.analyzer.nodes import Composite, Leaf, Symbol, to_json
from exonto.analyzer.parser import JsonAstParser
from exonto.analyzer.project import (
    FileAnalyzer,
    Project,
    ProjectAnalyzer,
    alias_name,
    extract_modules,
    source_path,
)
from exonto.config import Config
from exonto.errors import ParseError
from exonto.ns import CORE, EVOLUTION, STRUCTURE
from exonto.utils.git import Repository

BASE = "https://example.org/code#"


@pytest.fixture
def config():
    return Config.new(base_iri=BASE, include_git_info=False)


# ==============================================================================
#  PROJECT DETECTION
# ==============================================================================


def test_detect_reads_mix_file(mix_project):
    project = Project.detect(str(mix_project / "lib"))
    assert project.path == str(mix_project)
    assert (project.name, project.version) == ("my_app", "0.3.1")
    assert project.umbrella is False
    assert project.source_dirs == ["lib"]


def test_detect_umbrella(tmp_path):
    (tmp_path / "mix.exs").write_text('[apps_path: "apps", version: "1.0.0"]')
    for app in ("web", "core"):
        (tmp_path / "apps" / app).mkdir(parents=True)
        (tmp_path / "apps" / app / "mix.exs").write_text(f"[app: :{app}]")
    (tmp_path / "apps" / "notes").mkdir()

    project = Project.detect(str(tmp_path))
    assert project.umbrella is True
    assert project.apps == ["core", "web"]
    assert project.source_dirs == ["apps/core/lib", "apps/web/lib"]
    assert project.name == tmp_path.name


def test_detect_without_mix_file(tmp_path):
    with patch("exonto.analyzer.project.Project.find_mix_file", return_value=None):
        assert Project.detect(str(tmp_path)) is None
    assert Project.detect(str(tmp_path / "missing")) is None


# ==============================================================================
#  MODULE EXTRACTION
# ==============================================================================


def test_alias_name():
    aliases = Composite("__aliases__", {}, (Leaf(Symbol("MyApp")), Leaf(Symbol("Users"))))
    assert alias_name(aliases) == "MyApp.Users"
    assert alias_name(Leaf(Symbol("Elixir.Foo"))) == "Elixir.Foo"
    assert alias_name(Leaf(3)) is None


def test_extract_modules_nests_names(nested_modules_tree):
    modules = extract_modules(nested_modules_tree)
    assert [(m.name, parent) for m, parent in modules] == [
        ("Outer1", None),
        ("Outer1.Inner1", "Outer1"),
        ("Outer2", None),
        ("Outer2.Inner2", "Outer2"),
    ]
    outer1, inner1 = modules[0][0], modules[1][0]
    assert outer1.docstring == "First outer"
    assert inner1.docstring is None
    assert inner1.nested is True
    assert inner1.location.start_line == 3


def test_extract_modules_skips_dynamic_names():
    dynamic = Composite("defmodule", {"line": 1}, (Composite("name", {}, ()), Composite("__block__", {}, ())))
    assert extract_modules(dynamic) == []


def test_source_path():
    assert source_path("lib/foo.ex.json") == "lib/foo.ex"
    assert source_path("mix.exs.json") == "mix.exs"
    assert source_path("data/foo.json") == "data/foo.json"
    assert source_path("lib/foo.ex") == "lib/foo.ex"


# ==============================================================================
#  FILE ANALYSIS
# ==============================================================================


def test_file_analyzer_emits_module_and_file_triples(mix_project, config):
    analysis = FileAnalyzer(JsonAstParser(), config).analyze(
        str(mix_project / "lib" / "my_app.ex.json"), "lib/my_app.ex.json"
    )
    g = analysis.graph
    file_iri = IRI.for_source_file(BASE, "lib/my_app.ex")
    app_iri = IRI.for_module(BASE, "MyApp")
    worker_iri = IRI.for_module(BASE, "MyApp.Worker")

    assert analysis.relative_path == "lib/my_app.ex"
    assert (file_iri, RDF.type, CORE.SourceFile) in g
    assert (app_iri, RDF.type, STRUCTURE.Module) in g
    assert (worker_iri, RDF.type, STRUCTURE.NestedModule) in g
    assert (worker_iri, STRUCTURE.parentModule, app_iri) in g
    assert (app_iri, STRUCTURE.docstring, Literal("Main", datatype=XSD.string)) in g
    assert (app_iri, CORE.definedInFile, file_iri) in g
    assert not list(g.triples((None, CORE.sourceUrl, None)))

    assert analysis.metadata["module_count"] == 2
    assert analysis.metadata["node_count"] > 0
    assert len(analysis.metadata["content_hash"]) > 0


def test_file_analyzer_adds_source_urls(mix_project, config):
    repo = Repository(host="github.com", owner="acme", name="my_app", current_commit="abc123")
    analysis = FileAnalyzer(JsonAstParser(), config, repository=repo).analyze(
        str(mix_project / "lib" / "my_app.ex.json"), "lib/my_app.ex.json"
    )
    url = analysis.graph.value(IRI.for_module(BASE, "MyApp.Worker"), CORE.sourceUrl)
    assert str(url) == "https://github.com/acme/my_app/blob/abc123/lib/my_app.ex#L4"
    assert url.datatype == XSD.anyURI



def test_file_analyzer_source_urls_are_relative_to_git_root(tmp_path, config):
    app = tmp_path / "apps_dir" / "svc"
    (app / "lib").mkdir(parents=True)
    (app / "mix.exs").write_text("[app: :svc]")
    tree = Composite("defmodule", {"line": 1}, (Composite("__aliases__", {}, (Leaf(Symbol("Svc")),)),))
    (app / "lib" / "svc.ex.json").write_text(json.dumps(to_json(tree)))
    repo = Repository(host="github.com", owner="acme", name="mono", current_commit="abc123", path=str(tmp_path))

    analysis = FileAnalyzer(JsonAstParser(), config, repository=repo).analyze(
        str(app / "lib" / "svc.ex.json"), "lib/svc.ex.json"
    )
    url = analysis.graph.value(IRI.for_module(BASE, "Svc"), CORE.sourceUrl)
    assert str(url) == "https://github.com/acme/mono/blob/abc123/apps_dir/svc/lib/svc.ex#L1"
    assert (IRI.for_source_file(BASE, "lib/svc.ex"), RDF.type, CORE.SourceFile) in analysis.graph


def test_file_analyzer_source_text_from_sibling_source(mix_project):
    (mix_project / "lib" / "my_app.ex").write_text("defmodule MyApp do\nend\n")
    path = str(mix_project / "lib" / "my_app.ex.json")
    file_iri = IRI.for_source_file(BASE, "lib/my_app.ex")

    on = FileAnalyzer(JsonAstParser(), Config.new(base_iri=BASE, include_source_text=True)).analyze(
        path, "lib/my_app.ex.json"
    )
    assert on.graph.value(file_iri, CORE.sourceText) == Literal("defmodule MyApp do\nend\n", datatype=XSD.string)

    off = FileAnalyzer(JsonAstParser(), Config.new(base_iri=BASE)).analyze(path, "lib/my_app.ex.json")
    assert off.graph.value(file_iri, CORE.sourceText) is None


def test_file_analyzer_source_text_needs_sibling_source(mix_project):
    config = Config.new(base_iri=BASE, include_source_text=True)
    analysis = FileAnalyzer(JsonAstParser(), config).analyze(
        str(mix_project / "lib" / "other.ex.json"), "lib/other.ex.json"
    )
    assert not list(analysis.graph.triples((None, CORE.sourceText, None)))


def test_file_analyzer_syntax_tree_for_project_files_only(mix_project):
    config = Config.new(base_iri=BASE, include_expressions=True)
    path = str(mix_project / "lib" / "other.ex.json")

    analysis = FileAnalyzer(JsonAstParser(), config).analyze(path, "lib/other.ex.json")
    dumped = analysis.graph.value(IRI.for_source_file(BASE, "lib/other.ex"), CORE.syntaxTree)
    assert json.loads(str(dumped))["tag"] == "defmodule"

    deps = FileAnalyzer(JsonAstParser(), config).analyze(path, "deps/other/lib/other.ex.json")
    assert not list(deps.graph.triples((None, CORE.syntaxTree, None)))

    plain = FileAnalyzer(JsonAstParser(), Config.new(base_iri=BASE)).analyze(path, "lib/other.ex.json")
    assert not list(plain.graph.triples((None, CORE.syntaxTree, None)))


# ==============================================================================
#  PROJECT ANALYSIS
# ==============================================================================


def test_project_analyzer_merges_files(mix_project, config):
    result = ProjectAnalyzer(JsonAstParser(), config).analyze(str(mix_project))

    assert [f.relative_path for f in result.successful] == ["lib/my_app.ex.json", "lib/other.ex.json"]
    assert result.errors == []
    names = {str(o) for o in result.graph.objects(None, STRUCTURE.moduleName)}
    assert names == {"MyApp", "MyApp.Worker", "MyApp.Other"}
    assert result.metadata["file_count"] == 2
    assert result.metadata["has_repository"] is False
    assert result.metadata["triple_count"] == len(result.graph)


def test_project_analyzer_collects_parse_errors(mix_project, config):
    (mix_project / "lib" / "broken.ex.json").write_text('{"tag": ')

    result = ProjectAnalyzer(JsonAstParser(), config).analyze(str(mix_project))
    assert len(result.successful) == 2
    [(path, error)] = result.errors
    assert path == "lib/broken.ex.json"
    assert isinstance(error, ParseError)
    assert result.metadata["failed"] == 1


def test_project_analyzer_fail_fast(mix_project, config):
    (mix_project / "lib" / "broken.ex.json").write_text('{"tag": ')
    with pytest.raises(ParseError):
        ProjectAnalyzer(JsonAstParser(), config).analyze(str(mix_project), continue_on_error=False)


def test_project_analyzer_requires_mix_project(tmp_path, config):
    with patch("exonto.analyzer.project.Project.detect", return_value=None):
        with pytest.raises(FileNotFoundError):
            ProjectAnalyzer(JsonAstParser(), config).analyze(str(tmp_path))


def test_project_analyzer_repository_triples(mix_project):
    repo = Repository(
        host="github.com",
        owner="acme",
        name="my_app",
        current_commit="abc123",
        remote_url="https://github.com/acme/my_app.git",
    )
    config = Config.new(base_iri=BASE, include_git_info=True)
    with patch("exonto.analyzer.project.GitClient") as client_cls:
        client_cls.return_value.repository.return_value = repo
        result = ProjectAnalyzer(JsonAstParser(), config).analyze(str(mix_project))

    repo_iri = IRI.for_repository(BASE, repo.remote_url)
    commit_iri = IRI.for_commit(repo_iri, "abc123")
    g = result.graph
    assert (repo_iri, RDF.type, EVOLUTION.Repository) in g
    assert (commit_iri, EVOLUTION.inRepository, repo_iri) in g
    assert (commit_iri, EVOLUTION.commitHash, Literal("abc123", datatype=XSD.string)) in g
    assert result.metadata["has_repository"] is True
    assert len(list(g.triples((None, CORE.sourceUrl, None)))) == 3


def test_project_analyzer_survives_ill_typed_and_deep_dumps(mix_project, config):
    (mix_project / "lib" / "bad.ex.json").write_text('{"tag": "defmodule", "meta": {}, "children": 5}')
    (mix_project / "lib" / "deep.ex.json").write_text("[" * 100000 + "]" * 100000)

    result = ProjectAnalyzer(JsonAstParser(), config).analyze(str(mix_project))
    assert [f.relative_path for f in result.successful] == ["lib/my_app.ex.json", "lib/other.ex.json"]
    assert sorted(path for path, _ in result.errors) == ["lib/bad.ex.json", "lib/deep.ex.json"]
    assert all(isinstance(error, ParseError) for _, error in result.errors)
