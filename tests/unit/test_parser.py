import json

import pytest

from exonto.analyzer.nodes import Composite, Leaf, Symbol
from exonto.analyzer.parser import UTF8_BOM, JsonAstParser, ParseOptions
from exonto.errors import ParseError

TREE = {
    "tag": "defmodule",
    "meta": {"line": 1, "column": 1, "do": {"line": 1}},
    "children": [{"tag": "__aliases__", "meta": {"line": 1, "column": 11}, "children": [{"symbol": "MyApp"}]}],
}


@pytest.fixture
def parser():
    return JsonAstParser()


def test_parse_builds_tree(parser):
    tree = parser.parse(json.dumps(TREE))
    assert isinstance(tree, Composite)
    assert tree.tag == "defmodule"
    assert tree.line == 1 and tree.column == 1
    assert tree.children[0].children == (Leaf(Symbol("MyApp")),)


def test_track_columns_off_drops_column_only(parser):
    tree = parser.parse(json.dumps(TREE), ParseOptions(track_columns=False))
    assert tree.column is None
    assert tree.metadata == {"line": 1, "do": {"line": 1}}
    assert tree.children[0].metadata == {"line": 1}


def test_token_metadata_off_keeps_positions(parser):
    tree = parser.parse(json.dumps(TREE), ParseOptions(track_token_metadata=False))
    assert tree.metadata == {"line": 1, "column": 1}


def test_malformed_json_reports_position(parser):
    with pytest.raises(ParseError) as exc:
        parser.parse('{"tag": "x",\n  "children": [')
    assert exc.value.line == 2
    assert exc.value.column is not None
    assert exc.value.file is None
    assert str(exc.value).startswith("nofile:2:")


def test_unrecognized_node_is_parse_error(parser):
    with pytest.raises(ParseError, match="Unrecognized node object"):
        parser.parse('{"kind": "x"}')


def test_parse_file_strips_bom(parser, tmp_path):
    path = tmp_path / "a.ex.json"
    path.write_text(UTF8_BOM + json.dumps(TREE), encoding="utf-8")

    parsed = parser.parse_file(str(path))
    assert parsed.path == str(path)
    assert not parsed.source.startswith(UTF8_BOM)
    assert parsed.tree.tag == "defmodule"
    assert parsed.size == path.stat().st_size


def test_parse_file_labels_errors_with_path(parser, tmp_path):
    path = tmp_path / "broken.ex.json"
    path.write_text("[1, 2")

    with pytest.raises(ParseError) as exc:
        parser.parse_file(str(path))
    assert exc.value.file == str(path)
    assert str(exc.value).startswith(str(path))


def test_parse_file_missing(parser, tmp_path):
    with pytest.raises(ParseError, match="Cannot read file"):
        parser.parse_file(str(tmp_path / "missing.json"))


@pytest.mark.parametrize(
    "text, message",
    [
        ('{"tag": "defmodule", "meta": {}, "children": 5}', "children must be a list"),
        ('{"tag": "defmodule", "meta": [1], "children": []}', "meta must be an object"),
    ],
)
def test_ill_typed_node_fields_are_parse_errors(parser, text, message):
    with pytest.raises(ParseError, match=message):
        parser.parse(text)


def test_overly_nested_json_is_parse_error(parser):
    with pytest.raises(ParseError, match="nested too deeply"):
        parser.parse("[" * 100000 + "]" * 100000)


def test_overly_nested_tree_is_parse_error(parser):
    depth = 5000
    text = '{"tag": "x", "meta": {}, "children": [' * depth + "1" + "]}" * depth
    with pytest.raises(ParseError, match="nested too deeply"):
        parser.parse(text)
