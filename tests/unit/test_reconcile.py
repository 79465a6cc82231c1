from __future__ import annotations

import logging

import pytest

from sheetdiff.models.dataset import Dataset
from sheetdiff.models.diff_result import DiffRow, DiffStatus, RemovedRow
from sheetdiff.services.reconcile import (
    InvalidColumnSelectionError,
    ReconcileError,
    SchemaMismatchError,
    reconcile,
    resolve_column,
)


def _ds(rows: list[list[str]], headers: list[str] | None = None, source: str = "a.xlsx") -> Dataset:
    return Dataset(headers=headers or ["Code", "Text"], rows=rows, source=source, sheet_name="Sheet1")


def _run(rows_a, rows_b):
    return reconcile(_ds(rows_a), _ds(rows_b, source="b.xlsx"), 0, 0, [1], [1])


# ---- classification scenarios ----

def test_identical_row_is_unchanged():
    rows, removed, summary = _run([["K1", "foo"]], [["K1", "foo"]])
    assert rows == [DiffRow(DiffStatus.UNCHANGED, "K1", ("foo",), ("foo",))]
    assert removed == []
    assert summary.unchanged_count == 1
    assert summary.has_warnings is False


def test_cosmetic_difference_is_unchanged_but_raw_values_reported():
    rows, _, _ = _run([["K1", "foo  bar"]], [["K1", "foo\nbar"]])
    assert rows[0].status is DiffStatus.UNCHANGED
    assert rows[0].old_values == ("foo  bar",)
    assert rows[0].new_values == ("foo\nbar",)


def test_changed_value():
    rows, removed, summary = _run([["K1", "foo"]], [["K1", "bar"]])
    assert rows == [DiffRow(DiffStatus.CHANGED, "K1", ("foo",), ("bar",))]
    assert removed == []
    assert summary.changed_count == 1


def test_added_key():
    rows, removed, summary = _run([], [["K2", "new"]])
    assert rows == [DiffRow(DiffStatus.ADDED, "K2", ("",), ("new",))]
    assert removed == []
    assert summary.added_count == 1


def test_removed_key_goes_to_removed_only():
    rows, removed, summary = _run([["K3", "old"]], [])
    assert rows == []
    assert removed == [RemovedRow("K3", ("old",))]
    assert summary.removed_count == 1


def test_duplicate_key_with_one_match():
    rows, removed, summary = _run(
        [["K1", "foo"], ["K1", "bar"]],
        [["K1", "foo"], ["K1", "baz"]],
    )
    assert rows == [
        DiffRow(DiffStatus.UNCHANGED, "K1", ("foo",), ("foo",)),
        DiffRow(DiffStatus.CHANGED, "K1", ("bar",), ("baz",)),
    ]
    assert removed == []
    assert summary.duplicate_keys_a == {"K1"}
    assert summary.duplicate_keys_b == {"K1"}
    assert summary.has_warnings


def test_duplicate_baseline_rows_with_one_revision_row():
    rows, removed, summary = _run(
        [["K1", "foo"], ["K1", "foo"]],
        [["K1", "foo"]],
    )
    assert rows == [DiffRow(DiffStatus.UNCHANGED, "K1", ("foo",), ("foo",))]
    assert removed == [RemovedRow("K1", ("foo",))]
    assert (summary.unchanged_count, summary.removed_count) == (1, 1)
    assert summary.duplicate_keys_a == {"K1"}
    assert summary.duplicate_keys_b == frozenset()
    assert summary.has_warnings


def test_surplus_revision_rows_are_added():
    rows, removed, summary = _run(
        [["K1", "foo"]],
        [["K1", "x"], ["K1", "foo"], ["K1", "y"]],
    )
    assert rows == [
        DiffRow(DiffStatus.UNCHANGED, "K1", ("foo",), ("foo",)),
        DiffRow(DiffStatus.ADDED, "K1", ("",), ("x",)),
        DiffRow(DiffStatus.ADDED, "K1", ("",), ("y",)),
    ]
    assert removed == []
    assert (summary.unchanged_count, summary.changed_count, summary.added_count) == (1, 0, 2)


def test_surplus_baseline_rows_are_removed():
    rows, removed, summary = _run(
        [["K1", "a"], ["K1", "b"], ["K1", "c"]],
        [["K1", "z"]],
    )
    assert rows == [DiffRow(DiffStatus.CHANGED, "K1", ("a",), ("z",))]
    assert removed == [RemovedRow("K1", ("b",)), RemovedRow("K1", ("c",))]
    assert summary.removed_count == 2


def test_matching_prefers_values_over_position():
    rows, removed, _ = _run(
        [["K1", "old"], ["K1", "same"]],
        [["K1", "same"], ["K1", "new"]],
    )
    assert rows == [
        DiffRow(DiffStatus.UNCHANGED, "K1", ("same",), ("same",)),
        DiffRow(DiffStatus.CHANGED, "K1", ("old",), ("new",)),
    ]
    assert removed == []


def test_multi_column_comparison():
    headers = ["Code", "Text", "Owner"]
    a = _ds([["K1", "foo", "alice"], ["K2", "bar", "bob"]], headers)
    b = _ds([["K1", "foo", "alice"], ["K2", "bar", "carol"]], headers)
    rows, _, summary = reconcile(a, b, 0, 0, [1, 2], [1, 2])
    assert rows[0].status is DiffStatus.UNCHANGED
    assert rows[1] == DiffRow(DiffStatus.CHANGED, "K2", ("bar", "bob"), ("bar", "carol"))
    assert summary.changed_count == 1


def test_composite_column_order_matters():
    headers = ["Code", "Text", "Owner"]
    a = _ds([["K1", "x", "y"]], headers)
    b = _ds([["K1", "y", "x"]], headers)
    rows, _, _ = reconcile(a, b, 0, 0, [1, 2], [1, 2])
    assert rows[0].status is DiffStatus.CHANGED


# ---- ordering / keys ----

def test_rows_follow_revision_key_order_then_baseline_only_keys():
    rows, removed, _ = _run(
        [["A", "1"], ["B", "1"], ["C", "1"]],
        [["C", "1"], ["D", "1"], ["A", "2"]],
    )
    assert [r.key for r in rows] == ["C", "D", "A"]
    assert [r.status for r in rows] == [DiffStatus.UNCHANGED, DiffStatus.ADDED, DiffStatus.CHANGED]
    assert removed == [RemovedRow("B", ("1",))]


def test_keys_match_after_normalization():
    rows, removed, _ = _run([["K1 ", "foo"]], [["\ufeffK1", "foo"]])
    assert len(rows) == 1
    assert rows[0].status is DiffStatus.UNCHANGED
    # 出力キーは revision 側の生値
    assert rows[0].key == "\ufeffK1"
    assert removed == []


def test_empty_keys_skipped_and_counted():
    rows, removed, summary = _run(
        [["", "orphan"], ["K1", "foo"]],
        [["K1", "foo"], ["  ", "orphan"], ["", "other"]],
    )
    assert [r.key for r in rows] == ["K1"]
    assert removed == []
    assert summary.empty_keys_a == 1
    assert summary.empty_keys_b == 2
    assert summary.has_warnings


def test_both_empty_is_an_empty_result():
    rows, removed, summary = _run([], [])
    assert rows == []
    assert removed == []
    assert summary.unchanged_count == summary.added_count == 0
    assert summary.changed_count == summary.removed_count == 0


def test_short_rows_compare_as_blank():
    rows, _, _ = _run([["K1"]], [["K1", ""]])
    assert rows[0].status is DiffStatus.UNCHANGED


# ---- invariants ----

def test_every_keyed_row_is_accounted_for():
    rows_a = [["K1", "a"], ["K1", "b"], ["K2", "c"], ["K3", "d"], ["K3", "d"], ["", "x"]]
    rows_b = [["K3", "d"], ["K1", "b"], ["K4", "e"], ["K1", "z"], ["K1", "y"], ["K2", "c2"]]
    rows, removed, summary = _run(rows_a, rows_b)

    keyed_a = sum(1 for r in rows_a if r[0])
    keyed_b = sum(1 for r in rows_b if r[0])
    from_a = summary.unchanged_count + summary.changed_count + summary.removed_count
    from_b = summary.unchanged_count + summary.changed_count + summary.added_count
    assert from_a == keyed_a
    assert from_b == keyed_b
    assert len(rows) == summary.unchanged_count + summary.changed_count + summary.added_count
    assert len(removed) == summary.removed_count


def test_identical_datasets_are_all_unchanged():
    data = [["K1", "a"], ["K2", "b"], ["K2", "c"], ["K3", ""]]
    rows, removed, summary = _run(data, [list(r) for r in data])
    assert all(r.status is DiffStatus.UNCHANGED for r in rows)
    assert removed == []
    assert summary.unchanged_count == 4


def test_swapping_sides_swaps_added_and_removed():
    rows_a = [["K1", "a"], ["K2", "b"]]
    rows_b = [["K2", "b"], ["K3", "c"]]
    _, _, forward = _run(rows_a, rows_b)
    _, _, backward = _run(rows_b, rows_a)
    assert forward.added_count == backward.removed_count == 1
    assert forward.removed_count == backward.added_count == 1
    assert forward.unchanged_count == backward.unchanged_count == 1


def test_result_exposes_attributes_and_status_filter():
    result = _run([["K1", "foo"], ["K2", "x"]], [["K1", "foo"], ["K2", "y"]])
    assert len(result.rows) == 2
    assert result.rows_with_status(DiffStatus.CHANGED) == [
        DiffRow(DiffStatus.CHANGED, "K2", ("x",), ("y",))
    ]


# ---- logging ----

def test_duplicate_and_empty_keys_are_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="sheetdiff"):
        _run([["K1", "a"], ["K1", "b"]], [["K1", "a"], ["", "x"]])
    messages = [r.getMessage() for r in caplog.records]
    assert any("duplicate keys" in m and "K1" in m for m in messages)
    assert any("without key skipped" in m for m in messages)


# ---- validation ----

def test_schema_mismatch_raises_before_classification():
    a = _ds([["K1", "foo"]], ["Code", "Text"])
    b = _ds([["K1", "foo", "bar"]], ["Code", "Text", "Text"])
    with pytest.raises(SchemaMismatchError) as ei:
        reconcile(a, b, 0, 0, [1], [1])
    assert ei.value.missing_in_a == ["Text"]
    assert ei.value.missing_in_b == []
    assert "missing in baseline" in str(ei.value)
    assert isinstance(ei.value, ReconcileError)


def test_header_order_difference_is_not_a_mismatch():
    a = _ds([["K1", "foo"]], ["Code", "Text"])
    b = _ds([["foo", "K1"]], ["Text", "Code"])
    rows, _, _ = reconcile(a, b, 0, 1, [1], [0])
    assert rows == [DiffRow(DiffStatus.UNCHANGED, "K1", ("foo",), ("foo",))]


@pytest.mark.parametrize(
    "key_a, key_b, cols_a, cols_b",
    [
        ("abc", 0, [1], [1]),  # non-numeric
        (0, 5, [1], [1]),  # out of range
        (-1, 0, [1], [1]),  # negative
        (True, 0, [1], [1]),  # bool is not an index
        ("\u00b2", 0, [1], [1]),  # superscript digit: isdigit() but not int()
        (0, 0, ["\u00b2"], ["\u00b2"]),
        (0, 0, [], []),  # empty selection
        (0, 0, [1], []),
        (0, 0, [1], [1, 0]),  # length mismatch
        (0, 0, [1], [0]),  # different logical column
    ],
)
def test_invalid_column_selection(key_a, key_b, cols_a, cols_b):
    a = _ds([["K1", "foo"]])
    b = _ds([["K1", "foo"]])
    with pytest.raises(InvalidColumnSelectionError):
        reconcile(a, b, key_a, key_b, cols_a, cols_b)


def test_numeric_strings_are_accepted_as_indexes():
    rows, _, _ = reconcile(_ds([["K1", "foo"]]), _ds([["K1", "foo"]]), "0", "0", ["1"], ["1"])
    assert rows[0].status is DiffStatus.UNCHANGED


# ---- resolve_column ----

def test_resolve_column_by_index_and_name():
    headers = ["Code", " Text ", "Text"]
    assert resolve_column(headers, 2, what="key") == 2
    assert resolve_column(headers, "1", what="key") == 1
    assert resolve_column(headers, "Code", what="key") == 0
    # 正規化後の最初の一致
    assert resolve_column(headers, "Text", what="key") == 1


@pytest.mark.parametrize("ref", ["Missing", "", 3, False, 1.5, "\u00b2", "7"])
def test_resolve_column_rejects_unknown(ref):
    with pytest.raises(InvalidColumnSelectionError):
        resolve_column(["Code", "Text"], ref, what="key column")


def test_resolve_column_prefers_numeric_header_name():
    # 数字だけのヘッダ名は列番号より優先して一致させる
    assert resolve_column(["Code", "Text", "2024"], "2024", what="compare column") == 2
    assert resolve_column(["Code", "0", "1"], "1", what="compare column") == 2
    assert resolve_column(["Code", "0", "1"], 1, what="compare column") == 1


def test_resolve_column_falls_back_to_index_string():
    assert resolve_column(["Code", "Text"], " 1 ", what="compare column") == 1
