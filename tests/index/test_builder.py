"""Tests for index assembly, serialization and persistence."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from ccd.core.errors import ErrorCode, IndexLoadError
from ccd.index.builder import (
    build_index,
    index_age_days,
    is_stale,
    load_index,
    parse_index_line,
    parse_index_text,
    serialize_index,
    write_index,
)
from ccd.index.keywords import KeywordLoader
from ccd.index.models import Index, IndexEntry


class TestIndexEntry:
    def test_line_without_keywords_is_bare_path(self) -> None:
        assert IndexEntry("/h/web").to_line() == "/h/web"

    def test_keywords_written_sorted_with_prefix(self) -> None:
        entry = IndexEntry("/h/web", frozenset({"work", "client"}))
        assert entry.to_line() == "/h/web #client #work"

    def test_depth_counts_segments(self) -> None:
        assert IndexEntry("/").depth == 0
        assert IndexEntry("/h/web").depth == 2


class TestIndexOrdering:
    """Entries are ordered by (depth, path)."""

    def test_shallow_first_then_lexicographic(self) -> None:
        index = Index.from_entries(
            [IndexEntry("/h/b/deep"), IndexEntry("/h/b"), IndexEntry("/h/a"), IndexEntry("/h")]
        )
        assert index.paths == ("/h", "/h/a", "/h/b", "/h/b/deep")

    def test_duplicate_paths_kept_once(self) -> None:
        index = Index.from_entries([IndexEntry("/h/a", frozenset({"x"})), IndexEntry("/h/a")])
        assert len(index) == 1
        assert index.entries[0].keywords == frozenset({"x"})


class TestBuildIndex:
    def test_keywords_attached_from_each_directory(self, tmp_path: Path) -> None:
        (tmp_path / "web").mkdir()
        (tmp_path / "web" / ".ccd_keywords").write_text("work\n")
        (tmp_path / "misc").mkdir()

        index = build_index(
            [str(tmp_path / "web"), str(tmp_path / "misc")], KeywordLoader()
        )

        by_path = {e.path: e.keywords for e in index}
        assert by_path[str(tmp_path / "web")] == frozenset({"work"})
        assert by_path[str(tmp_path / "misc")] == frozenset()

    def test_keywords_not_inherited_from_parent(self, tmp_path: Path) -> None:
        (tmp_path / "child").mkdir()
        (tmp_path / ".ccd_keywords").write_text("parent\n")
        index = build_index([str(tmp_path), str(tmp_path / "child")], KeywordLoader())
        assert {e.path: e.keywords for e in index}[str(tmp_path / "child")] == frozenset()


class TestSerialization:
    def test_empty_index_serializes_to_empty_string(self) -> None:
        assert serialize_index(Index()) == ""

    def test_one_line_per_entry_with_trailing_newline(self) -> None:
        index = Index.from_entries([IndexEntry("/h"), IndexEntry("/h/a", frozenset({"k"}))])
        assert serialize_index(index) == "/h\n/h/a #k\n"

    def test_same_inputs_same_bytes(self) -> None:
        entries = [IndexEntry("/h/b", frozenset({"z", "a", "m"})), IndexEntry("/h/a")]
        first = serialize_index(Index.from_entries(entries))
        second = serialize_index(Index.from_entries(reversed(entries)))
        assert first == second


class TestParseIndexLine:
    def test_bare_path(self) -> None:
        assert parse_index_line("/h/web") == IndexEntry("/h/web")

    def test_keywords(self) -> None:
        entry = parse_index_line("/h/web #client #work\n")
        assert entry == IndexEntry("/h/web", frozenset({"client", "work"}))

    def test_path_with_spaces(self) -> None:
        entry = parse_index_line("/h/My Projects/site #web")
        assert entry == IndexEntry("/h/My Projects/site", frozenset({"web"}))

    def test_trailing_space_belongs_to_path(self) -> None:
        assert parse_index_line("/h/draft ") == IndexEntry("/h/draft ")

    def test_crlf_line_ending_tolerated(self) -> None:
        assert parse_index_line("/h/web #work\r") == IndexEntry("/h/web", frozenset({"work"}))

    def test_path_ending_in_hash_word_reads_back_as_keyword(self) -> None:
        """Names like "notes #draft" are not escaped, so the suffix becomes a keyword."""
        line = IndexEntry("/h/notes #draft").to_line()
        assert parse_index_line(line) == IndexEntry("/h/notes", frozenset({"draft"}))

    @pytest.mark.parametrize("line", ["", "   ", "relative/path", "#orphan"])
    def test_rejects_non_entries(self, line: str) -> None:
        assert parse_index_line(line) is None


class TestParseIndexText:
    def test_malformed_lines_skipped(self) -> None:
        index = parse_index_text("/h\nnot-absolute\n\n/h/a #k\n")
        assert index.paths == ("/h", "/h/a")

    def test_reorders_hand_edited_file(self) -> None:
        index = parse_index_text("/h/a/b\n/h\n")
        assert index.paths == ("/h", "/h/a/b")

    def test_only_newline_separates_entries(self) -> None:
        index = parse_index_text("/h/notes\u2028old\n/h/a\x1cb\x0bc\n")
        assert index.paths == ("/h/a\x1cb\x0bc", "/h/notes\u2028old")


class TestWriteAndLoad:
    def test_round_trip_preserves_entries(self, tmp_path: Path) -> None:
        index = Index.from_entries(
            [IndexEntry("/h"), IndexEntry("/h/web", frozenset({"work"}))]
        )
        path = tmp_path / "cache" / "index"
        write_index(index, path)
        assert load_index(path) == index

    def test_rewrite_is_byte_identical(self, tmp_path: Path) -> None:
        index = Index.from_entries([IndexEntry("/h/web", frozenset({"b", "a"}))])
        path = tmp_path / "index"
        write_index(index, path)
        first = path.read_bytes()
        write_index(index, path)
        assert path.read_bytes() == first

    def test_no_temporary_files_left_behind(self, tmp_path: Path) -> None:
        path = tmp_path / "index"
        write_index(Index.from_entries([IndexEntry("/h")]), path)
        assert [p.name for p in tmp_path.iterdir()] == ["index"]

    def test_failed_replace_keeps_previous_index(self, tmp_path: Path) -> None:
        """A failed write leaves the old file untouched and removes the temp file."""
        # Given
        path = tmp_path / "index"
        write_index(Index.from_entries([IndexEntry("/old")]), path)

        # When
        with (
            patch("ccd.index.builder.os.replace", side_effect=OSError(28, "No space left")),
            pytest.raises(IndexLoadError) as exc_info,
        ):
            write_index(Index.from_entries([IndexEntry("/new")]), path)

        # Then
        assert exc_info.value.code is ErrorCode.INDEX_WRITE_FAILED
        assert path.read_text() == "/old\n"
        assert [p.name for p in tmp_path.iterdir()] == ["index"]

    def test_round_trip_keeps_unusual_names(self, tmp_path: Path) -> None:
        index = Index.from_entries(
            [
                IndexEntry("/h/notes\u2028old", frozenset({"archive"})),
                IndexEntry("/h/form\x0cfeed"),
                IndexEntry("/h/next\x85line"),
                IndexEntry("/h/draft "),
                IndexEntry("/h/café"),
            ]
        )
        path = tmp_path / "index"
        write_index(index, path)
        assert load_index(path) == index

    def test_undecodable_entry_fails_without_temp_file(self, tmp_path: Path) -> None:
        path = tmp_path / "index"
        write_index(Index.from_entries([IndexEntry("/old")]), path)

        with pytest.raises(IndexLoadError) as exc_info:
            write_index(Index.from_entries([IndexEntry("/h/caf\udce9")]), path)

        assert exc_info.value.code is ErrorCode.INDEX_WRITE_FAILED
        assert path.read_text() == "/old\n"
        assert [p.name for p in tmp_path.iterdir()] == ["index"]

    def test_interrupted_write_removes_temp_file(self, tmp_path: Path) -> None:
        with (
            patch("ccd.index.builder.os.fsync", side_effect=KeyboardInterrupt),
            pytest.raises(KeyboardInterrupt),
        ):
            write_index(Index.from_entries([IndexEntry("/h")]), tmp_path / "index")
        assert list(tmp_path.iterdir()) == []

    def test_missing_index_raises_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(IndexLoadError) as exc_info:
            load_index(tmp_path / "absent")
        assert exc_info.value.code is ErrorCode.INDEX_NOT_FOUND

    def test_directory_in_place_of_index_is_unreadable(self, tmp_path: Path) -> None:
        with pytest.raises(IndexLoadError) as exc_info:
            load_index(tmp_path)
        assert exc_info.value.code is ErrorCode.INDEX_UNREADABLE


class TestStaleness:
    def test_age_of_missing_file_is_none(self, tmp_path: Path) -> None:
        assert index_age_days(tmp_path / "absent") is None
        assert is_stale(tmp_path / "absent", 5) is False

    def test_age_from_mtime(self, tmp_path: Path) -> None:
        path = tmp_path / "index"
        path.write_text("")
        mtime = 1_700_000_000
        os.utime(path, (mtime, mtime))
        assert index_age_days(path, now=mtime + 2 * 86400) == pytest.approx(2.0)

    def test_stale_only_past_threshold(self, tmp_path: Path) -> None:
        path = tmp_path / "index"
        path.write_text("")
        mtime = 1_700_000_000
        os.utime(path, (mtime, mtime))
        assert is_stale(path, 5, now=mtime + 4 * 86400) is False
        assert is_stale(path, 5, now=mtime + 6 * 86400) is True
