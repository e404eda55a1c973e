from __future__ import annotations

from churnmap.join.engine import JoinedPair, JoinEngine, MatchTier
from churnmap.join.reconciler import ColumnReconciler


def pair(commit, path, designite=None, churn=None, tier=MatchTier.EXACT):
    return JoinedPair(
        designite=designite or {},
        churn=churn or {},
        commit_id=commit,
        file_path=path,
        tier=tier,
    )


def test_header_drops_key_and_internal_columns(columns):
    designite = [{"child_commit_id": "c1", "file_path": "A.java", "left_commit_id": "p",
                  "child_commit": "x", "smells": "2"}]
    churn = [{"child_commit": "c1", "parent_commit": "p", "new_path": "A.java",
              "old_path": "", "index": "0", "added": "5"}]

    header = ColumnReconciler(columns).build_header(designite, churn)

    assert header.header == ["commit_id", "file_path", "file_path_designite", "smells", "added"]


def test_clashing_churn_column_is_suffixed(columns):
    # same column name on both sides
    designite = [{"child_commit_id": "c1", "file_path": "src/A.java", "loc": "100"}]
    churn = [{"child_commit": "c1", "new_path": "src/A.java", "old_path": "", "loc": "7"}]

    reconciler = ColumnReconciler(columns)
    header = reconciler.build_header(designite, churn)
    table = reconciler.materialize(JoinEngine(columns).join(designite, churn), header)

    assert header.header == ["commit_id", "file_path", "file_path_designite", "loc", "loc_churn"]
    assert header.clashes == ["loc"]
    assert table.rows == [["c1", "src/A.java", "src/A.java", "100", "7"]]


def test_fallback_row_keeps_designite_path(columns):
    designite = [{"child_commit_id": "c1", "file_path": "old\\A.java", "loc": "10"}]
    churn = [{"child_commit": "c1", "new_path": "new/A.java", "old_path": "old/A.java", "loc": "3"}]

    reconciler = ColumnReconciler(columns)
    header = reconciler.build_header(designite, churn)
    table = reconciler.materialize(JoinEngine(columns).join(designite, churn), header)

    assert header.designite_rename["file_path"] == "file_path_designite"
    assert table.rows == [["c1", "new/A.java", "old\\A.java", "10", "3"]]


def test_custom_clash_suffix(columns):
    designite = [{"child_commit_id": "c1", "file_path": "A", "loc": "1"}]
    churn = [{"child_commit": "c1", "new_path": "A", "loc": "2"}]

    header = ColumnReconciler(columns, config={"clash_suffix": "_ch"}).build_header(designite, churn)

    assert header.header[-1] == "loc_ch"


def test_header_is_unique_for_overlapping_column_sets(columns):
    designite = [{"child_commit_id": "c1", "file_path": "A", "loc": "1", "loc_churn": "2",
                  "commit_id": "dup"}]
    churn = [{"child_commit": "c1", "new_path": "A", "loc": "3", "loc_churn": "4",
              "commit_id": "c1", "file_path": "A"}]

    header = ColumnReconciler(columns).build_header(designite, churn).header

    assert len(header) == len(set(header))
    assert header[:2] == ["commit_id", "file_path"]


def test_header_union_follows_first_seen_order(columns):
    designite = [
        {"child_commit_id": "c1", "file_path": "A", "b": "1"},
        {"child_commit_id": "c1", "file_path": "B", "a": "2", "b": "3"},
    ]
    churn = [{"child_commit": "c1", "new_path": "A"}]

    header = ColumnReconciler(columns).build_header(designite, churn)

    assert header.header == ["commit_id", "file_path", "file_path_designite", "b", "a"]


def test_missing_values_render_empty(columns):
    designite = [{"child_commit_id": "c1", "file_path": "A", "x": "1"}, {"y": "2"}]
    churn = [{"child_commit": "c1", "new_path": "A", "z": "3"}]
    reconciler = ColumnReconciler(columns)
    header = reconciler.build_header(designite, churn)

    row = reconciler.render_row(pair("c1", "A", designite={"y": "2"}, churn={}), header)

    assert header.header == ["commit_id", "file_path", "file_path_designite", "x", "y", "z"]
    assert row == ["c1", "A", "", "", "2", ""]


def test_dedup_last_write_wins_but_keeps_first_position(columns):
    designite = [{"child_commit_id": "c1", "file_path": "A", "v": ""}]
    churn = [{"child_commit": "c1", "new_path": "A"}]
    reconciler = ColumnReconciler(columns)
    header = reconciler.build_header(designite, churn)

    table = reconciler.materialize(
        [
            pair("c1", "f1", designite={"v": "first"}),
            pair("c1", "f2", designite={"v": "other"}),
            pair("c1", "f1", designite={"v": "last"}, tier=MatchTier.FALLBACK),
        ],
        header,
    )

    assert table.rows == [["c1", "f1", "", "last"], ["c1", "f2", "", "other"]]
    assert table.overwritten == 1


def test_fan_out_collapses_to_last_churn_row(columns):
    designite = [{"child_commit_id": "c1", "file_path": "src/A.java"}]
    churn = [
        {"child_commit": "c1", "new_path": "src/A.java", "added": "1"},
        {"child_commit": "c1", "new_path": "src/A.java", "added": "2"},
    ]
    reconciler = ColumnReconciler(columns)
    header = reconciler.build_header(designite, churn)

    table = reconciler.materialize(JoinEngine(columns).join(designite, churn), header)

    assert table.rows == [["c1", "src/A.java", "src/A.java", "2"]]
    assert table.overwritten == 1


def test_rows_match_header_width(columns):
    designite = [{"child_commit_id": "c1", "file_path": "a/A.java", "m1": "1"},
                 {"child_commit_id": "c1", "file_path": "B.java", "m2": "2"}]
    churn = [{"child_commit": "c1", "new_path": "a/A.java", "c1": "x"},
             {"child_commit": "c1", "new_path": "z/B.java"}]
    reconciler = ColumnReconciler(columns)
    header = reconciler.build_header(designite, churn)

    table = reconciler.materialize(JoinEngine(columns).join(designite, churn), header)

    assert len(table.rows) == 2
    assert all(len(row) == len(table.header) for row in table.rows)
