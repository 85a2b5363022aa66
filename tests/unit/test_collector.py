import os

import pytest

from exonto.collector.collector import SourceCollector
from exonto.collector.config import MAX_FILE_SIZE_BYTES


@pytest.fixture
def source_tree(tmp_path, create_file_helper):
    create_file_helper(tmp_path, "lib/app.ex", "defmodule App do end")
    create_file_helper(tmp_path, "lib/app/worker.ex", "defmodule App.Worker do end")
    create_file_helper(tmp_path, "mix.exs", "defmodule App.MixProject do end")
    create_file_helper(tmp_path, "test/app_test.exs", "defmodule AppTest do end")
    create_file_helper(tmp_path, "deps/jason/lib/jason.ex", "defmodule Jason do end")
    create_file_helper(tmp_path, "_build/dev/lib/app.ex", "defmodule App do end")
    create_file_helper(tmp_path, "README.md", "# App")
    create_file_helper(tmp_path, "lib/empty.ex", "")
    return tmp_path


def test_walk_applies_filters(source_tree):
    files = SourceCollector(str(source_tree)).collect()
    assert [f.rel_path for f in files] == ["lib/app.ex", "lib/app/worker.ex", "mix.exs"]
    assert all(f.git_hash is None and not f.is_tracked for f in files)


def test_categories(source_tree):
    files = {f.rel_path: f for f in SourceCollector(str(source_tree), exclude_tests=False).collect()}
    assert files["lib/app.ex"].category == "source"
    assert files["mix.exs"].category == "script"
    assert files["test/app_test.exs"].category == "test"
    assert files["test/app_test.exs"].is_test


def test_source_dirs_limit_the_walk(source_tree):
    files = SourceCollector(str(source_tree), source_dirs=["lib/"]).collect()
    assert [f.rel_path for f in files] == ["lib/app.ex", "lib/app/worker.ex"]


def test_custom_extensions(tmp_path, create_file_helper):
    create_file_helper(tmp_path, "lib/app.ex.json", "{}")
    create_file_helper(tmp_path, "lib/app.ex", "defmodule App do end")
    create_file_helper(tmp_path, "test/app_test.exs.json", "{}")

    files = SourceCollector(str(tmp_path), extensions=[".JSON"]).collect()
    assert [f.rel_path for f in files] == ["lib/app.ex.json"]
    assert files[0].category == "source"
    assert files[0].extension == ".json"


def test_oversized_files_are_skipped(tmp_path, create_file_helper):
    create_file_helper(tmp_path, "lib/big.ex", "x" * (MAX_FILE_SIZE_BYTES + 1))
    assert SourceCollector(str(tmp_path)).collect() == []


def test_symlinks_are_skipped(tmp_path, create_file_helper):
    create_file_helper(tmp_path, "lib/real.ex", "defmodule Real do end")
    os.symlink("real.ex", str(tmp_path / "lib" / "link.ex"))
    assert [f.rel_path for f in SourceCollector(str(tmp_path)).collect()] == ["lib/real.ex"]


def test_stream_files_batches(tmp_path, create_file_helper):
    for i in range(5):
        create_file_helper(tmp_path, f"lib/m{i}.ex", "defmodule M do end")
    batches = list(SourceCollector(str(tmp_path)).stream_files(chunk_size=2))
    assert [len(b) for b in batches] == [2, 2, 1]
