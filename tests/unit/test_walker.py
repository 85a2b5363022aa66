import pytest

from exonto.analyzer.nodes import Composite, Leaf, is_composite
from exonto.analyzer.walker import (
    Continue,
    Found,
    Halt,
    NotFound,
    Skip,
    collect,
    count_nodes,
    depth_of,
    find_all,
    max_depth,
    walk,
)
from exonto.errors import ConfigurationError


def addition():
    # 1 + 2
    return Composite("+", {"line": 1}, (Leaf(1), Leaf(2)))


def tagged(name, *children):
    return Composite(name, {"name": name}, children)


def test_count_nodes_counts_leaves_and_composites():
    assert count_nodes(addition()) == 3


def test_walk_returns_root_and_final_accumulator():
    root = addition()
    returned, acc = walk(root, [], lambda node, ctx, seen: Continue(seen + [node]))
    assert returned is root
    assert acc == [root, Leaf(1), Leaf(2)]


def test_find_all_returns_nested_matches_in_preorder(nested_modules_tree):
    found = find_all(nested_modules_tree, lambda node: is_composite(node, "defmodule"))
    names = [m.children[0].children[-1].value.name for m in found]
    assert names == ["Outer1", "Inner1", "Outer2", "Inner2"]


def test_find_all_accepts_context_predicate():
    tree = tagged("a", tagged("b", tagged("c")))
    deep = find_all(tree, lambda node, ctx: ctx.depth >= 1)
    assert [n.tag for n in deep] == ["b", "c"]


def test_skip_still_runs_post_for_skipped_node_only():
    tree = tagged("root", tagged("skip_me", tagged("hidden")), tagged("after"))
    posts = []

    def pre(node, ctx, acc):
        return Skip(acc) if node.tag == "skip_me" else Continue(acc)

    def post(node, ctx, acc):
        posts.append(node.tag)
        return Continue(acc)

    walk(tree, None, pre=pre, post=post)
    assert posts == ["skip_me", "after", "root"]
    assert "hidden" not in posts


def test_halt_stops_immediately_with_its_accumulator():
    tree = tagged("root", tagged("a"), tagged("stop"), tagged("never"))
    visited = []

    def pre(node, ctx, acc):
        visited.append(node.tag)
        if node.tag == "stop":
            return Halt("halted")
        return Continue(acc)

    posts = []

    def post(node, ctx, acc):
        posts.append(node.tag)
        return Continue(acc)

    _, acc = walk(tree, "start", pre=pre, post=post)
    assert acc == "halted"
    assert visited == ["root", "a", "stop"]
    assert posts == ["a"]


def test_halt_from_post_of_skipped_node_is_honoured():
    tree = tagged("root", tagged("skip_me", tagged("child")), tagged("never"))
    seen = []

    def pre(node, ctx, acc):
        seen.append(node.tag)
        return Skip(acc) if node.tag == "skip_me" else Continue(acc)

    def post(node, ctx, acc):
        return Halt("done") if node.tag == "skip_me" else Continue(acc)

    _, acc = walk(tree, None, pre=pre, post=post)
    assert acc == "done"
    assert "never" not in seen


def test_post_only_visits_children_before_parents():
    tree = tagged("root", tagged("a", tagged("a1")), tagged("b"))
    _, order = walk(tree, [], post=lambda node, ctx, acc: Continue(acc + [node.tag]))
    assert order == ["a1", "a", "b", "root"]


def test_context_depth_parents_and_path_agree():
    tree = tagged("root", tagged("a", tagged("b", Leaf("x"))))
    checked = []

    def pre(node, ctx, acc):
        assert ctx.depth == len(ctx.parents) == len(ctx.path)
        if ctx.at_root:
            assert ctx.parent is None
        else:
            assert ctx.parent is ctx.parents[0]
            assert ctx.path[-1] == ctx.parent.tag
        checked.append(ctx.depth)
        return Continue(acc)

    walk(tree, None, pre)
    assert checked == [0, 1, 2, 3]


def test_walk_without_callbacks_is_rejected():
    with pytest.raises(ConfigurationError):
        walk(addition(), 0)


def test_walk_rejects_non_action_return():
    with pytest.raises(ConfigurationError):
        walk(addition(), 0, lambda node, ctx, acc: acc)


def test_depth_of():
    target = tagged("target")
    tree = tagged("root", tagged("a", target))
    assert depth_of(tree, target) == Found(2)
    assert depth_of(tree, tagged("missing")) is NotFound
    assert not NotFound


def test_max_depth_and_collect():
    tree = tagged("root", tagged("a", Leaf(1)), Leaf(2))
    assert max_depth(tree) == 2
    assert collect(tree, lambda n: isinstance(n, Leaf), lambda n: n.value * 10) == [10, 20]


def test_halt_from_post_of_visited_composite_stops_remaining_siblings():
    tree = tagged("root", tagged("a", Leaf(1)), tagged("b"), tagged("c"))
    seen = []

    def pre(node, ctx, acc):
        seen.append(getattr(node, "tag", node))
        return Continue(acc + 1)

    def post(node, ctx, acc):
        return Halt(("stopped", acc)) if getattr(node, "tag", None) == "a" else Continue(acc)

    _, acc = walk(tree, 0, pre=pre, post=post)
    assert acc == ("stopped", 3)
    assert "b" not in seen and "c" not in seen


def test_repeated_walks_are_identical(nested_modules_tree):
    def record(node, ctx, acc):
        return Continue(acc + [(node, ctx.depth, ctx.path)])

    first = walk(nested_modules_tree, [], pre=record, post=record)
    second = walk(nested_modules_tree, [], pre=record, post=record)
    assert first[1] == second[1]
    assert len(first[1]) == 2 * count_nodes(nested_modules_tree)


def test_find_all_ignores_defaulted_predicate_parameters(nested_modules_tree):
    found = find_all(nested_modules_tree, lambda node, tag="defmodule": is_composite(node, tag))
    assert len(found) == 4


def test_deeply_nested_tree_does_not_exhaust_the_stack():
    depth = 3000
    node = Leaf(0)
    for i in range(depth):
        node = Composite("+", {}, (node, Leaf(i + 1)))

    assert max_depth(node) == depth
    assert count_nodes(node) == 2 * depth + 1
    assert len(find_all(node, lambda n: is_composite(n, "+"))) == depth
