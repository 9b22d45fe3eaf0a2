import json

import pytest

from docversion.domains.documents.diff import (
    ADDED, CHANGED, MOVED, REMOVED, REPLACED, EMPTY_DIFF, Change, Diff, DiffEngine, default_identity
)


@pytest.fixture
def engine():
    return DiffEngine()


def dumps(value) -> str:
    return json.dumps(value)


class TestWholeValueReplace:
    """Не-JSON и скалярные снимки сравниваются только целиком"""

    def test_plain_text_is_replaced_whole(self, engine):
        diff = engine.diff("hello", "world")
        assert diff == Diff((Change(REPLACED, (), old="hello", new="world"),))
        assert diff.is_replacement

    def test_json_against_plain_text(self, engine):
        diff = engine.diff('{"a": 1}', "not json")
        assert diff.to_list() == [{"op": REPLACED, "path": [], "old": {"a": 1}, "new": "not json"}]

    def test_json_scalars(self, engine):
        assert engine.diff("1", "2").to_list() == [{"op": REPLACED, "path": [], "old": 1, "new": 2}]

    def test_equal_json_scalars_with_different_spelling(self, engine):
        assert engine.diff("1", " 1 ").is_empty

    def test_container_against_scalar(self, engine):
        diff = engine.diff('[1, 2]', '"text"')
        assert diff.to_list() == [{"op": REPLACED, "path": [], "old": [1, 2], "new": "text"}]

    def test_bool_and_int_are_different_values(self, engine):
        assert engine.diff("true", "1").is_replacement


class TestStructuralDiff:
    """Рекурсивное сравнение JSON-деревьев"""

    def test_single_changed_key(self, engine):
        diff = engine.diff('{"a":1}', '{"a":2}')
        assert diff.to_list() == [{"op": CHANGED, "path": ["a"], "old": 1, "new": 2}]

    def test_added_and_removed_keys(self, engine):
        diff = engine.diff(dumps({"a": 1, "b": 2}), dumps({"b": 2, "c": 3}))
        assert diff.to_list() == [
            {"op": REMOVED, "path": ["a"], "old": 1},
            {"op": ADDED, "path": ["c"], "new": 3},
        ]

    def test_nested_change_reports_deep_path(self, engine):
        old = {"meta": {"title": "Draft", "tags": ["a"]}}
        new = {"meta": {"title": "Final", "tags": ["a"]}}
        diff = engine.diff(dumps(old), dumps(new))
        assert diff.to_list() == [{"op": CHANGED, "path": ["meta", "title"], "old": "Draft", "new": "Final"}]

    def test_type_change_of_nested_value(self, engine):
        diff = engine.diff(dumps({"x": {"y": 1}}), dumps({"x": [1]}))
        assert diff.to_list() == [{"op": CHANGED, "path": ["x"], "old": {"y": 1}, "new": [1]}]

    def test_root_object_against_root_array(self, engine):
        diff = engine.diff("{}", "[]")
        assert diff.to_list() == [{"op": CHANGED, "path": [], "old": {}, "new": []}]

    def test_int_and_float_differ(self, engine):
        diff = engine.diff(dumps({"n": 1}), dumps({"n": 1.0}))
        assert diff.to_list() == [{"op": CHANGED, "path": ["n"], "old": 1, "new": 1.0}]


class TestSequenceDiff:
    """Массивы сравниваются по идентичности элементов"""

    def test_insert_into_identified_objects_is_single_addition(self, engine):
        old = [{"id": 1, "text": "one"}, {"id": 2, "text": "two"}]
        new = [{"id": 3, "text": "three"}] + old
        diff = engine.diff(dumps(old), dumps(new))
        assert diff.to_list() == [{"op": ADDED, "path": [0], "new": {"id": 3, "text": "three"}}]

    def test_change_inside_identified_object(self, engine):
        old = {"blocks": [{"id": "a", "text": "one"}, {"id": "b", "text": "two"}]}
        new = {"blocks": [{"id": "a", "text": "one"}, {"id": "b", "text": "TWO"}]}
        diff = engine.diff(dumps(old), dumps(new))
        assert diff.to_list() == [
            {"op": CHANGED, "path": ["blocks", 1, "text"], "old": "two", "new": "TWO"}
        ]

    def test_removed_element_uses_old_index(self, engine):
        diff = engine.diff(dumps(["a", "b", "c"]), dumps(["a", "c"]))
        assert diff.to_list() == [{"op": REMOVED, "path": [1], "old": "b"}]

    def test_replaced_scalar_element(self, engine):
        diff = engine.diff(dumps([1, 2, 3]), dumps([1, 5, 3]))
        assert diff.to_list() == [
            {"op": REMOVED, "path": [1], "old": 2},
            {"op": ADDED, "path": [1], "new": 5},
        ]

    def test_pure_reorder_is_a_single_move(self, engine):
        old = [{"id": 1}, {"id": 2}, {"id": 3}]
        new = [{"id": 3}, {"id": 1}, {"id": 2}]
        diff = engine.diff(dumps(old), dumps(new))
        assert diff.to_list() == [{"op": MOVED, "path": [0], "from": 2}]

    def test_reorder_with_field_change(self, engine):
        old = [{"id": 1, "text": "a"}, {"id": 2, "text": "b"}]
        new = [{"id": 2, "text": "B"}, {"id": 1, "text": "a"}]
        diff = engine.diff(dumps(old), dumps(new))
        assert diff.to_list() == [
            {"op": CHANGED, "path": [0, "text"], "old": "b", "new": "B"},
            {"op": MOVED, "path": [1], "from": 0},
        ]

    def test_reorder_inside_nested_array(self, engine):
        old = {"blocks": [{"id": "a"}, {"id": "b"}], "title": "t"}
        new = {"blocks": [{"id": "b"}, {"id": "a"}], "title": "t"}
        diff = engine.diff(dumps(old), dumps(new))
        assert diff.to_list() == [{"op": MOVED, "path": ["blocks", 1], "from": 0}]

    def test_shift_after_insert_is_not_a_move(self, engine):
        old = [{"id": 1}, {"id": 2}, {"id": 3}]
        new = [{"id": 1}, {"id": 9}, {"id": 2}, {"id": 3}]
        diff = engine.diff(dumps(old), dumps(new))
        assert diff.to_list() == [{"op": ADDED, "path": [1], "new": {"id": 9}}]

    def test_duplicate_elements_are_compared_by_position(self, engine):
        diff = engine.diff(dumps(["x", "x"]), dumps(["x", "x", "x"]))
        assert diff.to_list() == [{"op": ADDED, "path": [2], "new": "x"}]

    def test_objects_without_id_are_matched_by_content(self, engine):
        old = [{"k": 1}, {"k": 2}]
        new = [{"k": 0}, {"k": 1}, {"k": 2}]
        diff = engine.diff(dumps(old), dumps(new))
        assert diff.to_list() == [{"op": ADDED, "path": [0], "new": {"k": 0}}]

    def test_custom_identity_strategy(self):
        engine = DiffEngine(identify=lambda item: str(item.get("key")))
        old = [{"key": "x", "v": 1}, {"key": "y", "v": 1}]
        new = [{"key": "y", "v": 2}]
        diff = engine.diff(dumps(old), dumps(new))
        assert diff.to_list() == [
            {"op": REMOVED, "path": [0], "old": {"key": "x", "v": 1}},
            {"op": CHANGED, "path": [0, "v"], "old": 1, "new": 2},
        ]

    def test_identity_passed_per_call_overrides_default(self, engine):
        old = [{"key": "x", "v": 1}]
        new = [{"key": "x", "v": 2}]
        by_key = engine.diff(dumps(old), dumps(new), identify=lambda item: item["key"])
        by_value = engine.diff(dumps(old), dumps(new))
        assert [c.op for c in by_key] == [CHANGED]
        assert [c.op for c in by_value] == [REMOVED, ADDED]


class TestDiffPolicy:

    def test_hash_key_is_ignored(self, engine):
        old = [{"id": 1, "$hashKey": "object:1", "text": "a"}]
        new = [{"id": 1, "$hashKey": "object:7", "text": "a"}]
        assert engine.diff(dumps(old), dumps(new)).is_empty

    def test_hash_key_is_ignored_for_identity_by_value(self, engine):
        old = [{"text": "a", "$hashKey": "object:1"}]
        new = [{"text": "a", "$hashKey": "object:2"}]
        assert engine.diff(dumps(old), dumps(new)).is_empty

    def test_ignored_keys_are_configurable(self):
        engine = DiffEngine(ignored_keys=["_ui"])
        diff = engine.diff(dumps({"a": 1, "_ui": {"open": True}}), dumps({"a": 1, "_ui": {"open": False}}))
        assert diff.is_empty

    @pytest.mark.parametrize("content", [
        "hello", "", '{"a": [1, {"id": 2}]}', "[]", "3.5", '"quoted"', "NaN",
    ])
    def test_same_content_gives_empty_diff(self, engine, content):
        assert engine.diff(content, content) == EMPTY_DIFF

    def test_key_order_does_not_matter(self, engine):
        assert engine.diff('{"a": 1, "b": 2}', '{"b": 2, "a": 1}').is_empty

    def test_diff_is_deterministic(self, engine):
        old = dumps({"z": [1, {"id": 1, "v": "a"}], "a": {"x": 1, "y": 2}, "m": "keep"})
        new = dumps({"a": {"y": 3}, "z": [{"id": 1, "v": "b"}, 2], "n": None, "m": "keep"})
        first = engine.diff(old, new)
        second = engine.diff(old, new)
        assert first == second
        assert first.to_list() == second.to_list()

    def test_failing_identity_degrades_to_replace(self):
        def broken(item):
            raise KeyError("id")

        engine = DiffEngine(identify=broken)
        diff = engine.diff("[1]", "[2]")
        assert diff.to_list() == [{"op": REPLACED, "path": [], "old": [1], "new": [2]}]


class TestDiffSerialization:

    def test_records_survive_json_column(self, engine):
        diff = engine.diff(dumps([{"id": 1}, {"id": 2}]), dumps([{"id": 2}, {"id": 1}, {"id": 3}]))
        assert json.loads(json.dumps(diff.to_list())) == diff.to_list()

    def test_empty_diff_serializes_to_empty_list(self):
        assert EMPTY_DIFF.to_list() == []
        assert len(EMPTY_DIFF) == 0


def test_default_identity_prefers_id_field():
    assert default_identity({"id": 7, "text": "a"}) == default_identity({"id": 7, "text": "b"})
    assert default_identity({"text": "a"}) != default_identity({"text": "b"})
    assert default_identity({"id": "", "text": "a"}) != default_identity({"id": "", "text": "b"})
