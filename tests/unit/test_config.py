import pytest

from exonto.config import DEFAULT_BASE_IRI, Config, project_file
from exonto.errors import ConfigurationError


def test_defaults():
    config = Config.default()
    assert config.base_iri == DEFAULT_BASE_IRI
    assert config.output_format == "turtle"
    assert config.include_git_info is True
    assert config.validate() == []


def test_from_env(monkeypatch):
    monkeypatch.setenv("EXONTO_BASE_IRI", "https://acme.test/code#")
    monkeypatch.setenv("EXONTO_OUTPUT_FORMAT", "jsonld")
    monkeypatch.setenv("EXONTO_INCLUDE_GIT_INFO", "false")
    monkeypatch.setenv("EXONTO_INCLUDE_EXPRESSIONS", "yes")

    config = Config.from_env()
    assert config.base_iri == "https://acme.test/code#"
    assert config.rdflib_format == "json-ld"
    assert config.include_git_info is False
    assert config.include_expressions is True


def test_merge_ignores_unknown_keys_and_none():
    config = Config.default().merge(output_format="ntriples", base_iri=None, bogus=1)
    assert config.output_format == "ntriples"
    assert config.base_iri == DEFAULT_BASE_IRI
    assert not hasattr(config, "bogus")


def test_new_validates():
    with pytest.raises(ConfigurationError) as exc:
        Config.new(output_format="xml", base_iri="")
    message = str(exc.value)
    assert message.startswith("Invalid config: ")
    assert "base_iri" in message and "output_format" in message


def test_project_file_excludes_dependencies():
    assert project_file("lib/foo.ex")
    assert not project_file("deps/jason/lib/jason.ex")
    assert not project_file("/home/x/proj/deps/a.ex")
    assert not project_file("deps\\a.ex")
    assert not project_file(None)


def test_should_extract_full():
    config = Config.new(include_expressions=True)
    assert config.should_extract_full("lib/foo.ex")
    assert not config.should_extract_full("deps/foo.ex")
    assert not Config.default().should_extract_full("lib/foo.ex")
