"""End-to-end tests for the rebuild pipeline."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from ccd.config.models import CcdConfig, IndexConfig, PatternsConfig
from ccd.config.patterns import PatternSet
from ccd.core.errors import ErrorCode, TraversalError
from ccd.index.builder import load_index
from ccd.index.ops import build_from_root, rebuild_index
from ccd.query.engine import parse_terms, query


@pytest.fixture
def home_tree(make_tree) -> Path:
    """A small home directory with workspaces, junk and keywords."""
    return make_tree(
        "code/webapp/package.json",
        "code/webapp/src/components/",
        "code/webapp/node_modules/react/",
        "code/rustbox/Cargo.toml",
        "code/rustbox/.git/HEAD",
        "code/rustbox/src/",
        "code/rustbox/.ccd_keywords",
        "docs/recipes/",
        "docs/.ccd_keywords",
        ".cache/thumbs/",
        contents={
            "code/rustbox/.ccd_keywords": "Systems\nrust\n",
            "docs/.ccd_keywords": "reading\n",
        },
    )


def _config(tmp_path: Path, root: Path) -> CcdConfig:
    return CcdConfig(
        index=IndexConfig(root=str(root), index_path=str(tmp_path / "cache" / "index")),
        patterns=PatternsConfig(
            ignore_file=str(tmp_path / "cfg" / "ignore"),
            markers_file=str(tmp_path / "cfg" / "markers"),
        ),
    )


class TestBuildFromRoot:
    """Traverse -> resolve -> keywords, without persistence."""

    def test_workspaces_folded_and_junk_pruned(self, home_tree: Path) -> None:
        # When
        result = build_from_root(home_tree, PatternSet.defaults(), keyword_file=".ccd_keywords")

        # Then
        assert result.index.paths == (
            str(home_tree),
            str(home_tree / "code"),
            str(home_tree / "docs"),
            str(home_tree / "code" / "rustbox"),
            str(home_tree / "code" / "webapp"),
            str(home_tree / "docs" / "recipes"),
        )
        assert result.workspace_roots == frozenset(
            {str(home_tree / "code" / "rustbox"), str(home_tree / "code" / "webapp")}
        )

    def test_keywords_attached(self, home_tree: Path) -> None:
        result = build_from_root(home_tree, PatternSet.defaults(), keyword_file=".ccd_keywords")
        keywords = {e.path: e.keywords for e in result.index}
        assert keywords[str(home_tree / "code" / "rustbox")] == frozenset({"systems", "rust"})
        assert keywords[str(home_tree / "docs")] == frozenset({"reading"})
        assert result.keyword_files == 2

    def test_stats_count_pruned_directories(self, home_tree: Path) -> None:
        result = build_from_root(home_tree, PatternSet.defaults(), keyword_file=".ccd_keywords")
        # .cache, node_modules, .git
        assert result.stats.pruned == 3
        assert result.diagnostics == []

    def test_missing_root_raises(self, tmp_path: Path) -> None:
        with pytest.raises(TraversalError):
            build_from_root(tmp_path / "absent", PatternSet.defaults(), keyword_file="k")


class TestRebuildIndex:
    def test_writes_index_file(self, tmp_path: Path, home_tree: Path) -> None:
        config = _config(tmp_path, home_tree)

        result = rebuild_index(config)

        assert result.index_path == tmp_path / "cache" / "index"
        assert load_index(result.index_path) == result.index
        assert result.elapsed_s >= 0

    def test_user_pattern_files_respected(self, tmp_path: Path, home_tree: Path) -> None:
        """Custom ignore and marker files replace the baseline."""
        # Given
        cfg_dir = tmp_path / "cfg"
        cfg_dir.mkdir()
        (cfg_dir / "ignore").write_text("/docs$\n")
        (cfg_dir / "markers").write_text("Cargo.toml\n")

        # When
        result = rebuild_index(_config(tmp_path, home_tree))

        # Then
        paths = result.index.paths
        assert str(home_tree / "docs") not in paths
        # package.json is no longer a marker, so webapp's subtree is indexed
        assert str(home_tree / "code" / "webapp" / "src" / "components") in paths
        assert str(home_tree / "code" / "rustbox" / "src") not in paths
        # hidden directories are no longer ignored either
        assert str(home_tree / ".cache" / "thumbs") in paths

    def test_bad_ignore_file_reported_and_defaults_used(
        self, tmp_path: Path, home_tree: Path
    ) -> None:
        cfg_dir = tmp_path / "cfg"
        cfg_dir.mkdir()
        (cfg_dir / "ignore").write_text("[broken\n")

        result = rebuild_index(_config(tmp_path, home_tree))

        assert len(result.diagnostics) == 1
        assert not any("node_modules" in p for p in result.index.paths)

    def test_root_override(self, tmp_path: Path, home_tree: Path) -> None:
        result = rebuild_index(_config(tmp_path, home_tree), root=home_tree / "docs")
        assert result.index.paths == (str(home_tree / "docs"), str(home_tree / "docs" / "recipes"))

    def test_rebuild_replaces_previous_index(self, tmp_path: Path, home_tree: Path) -> None:
        config = _config(tmp_path, home_tree)
        rebuild_index(config)
        (home_tree / "docs" / "recipes").rmdir()

        result = rebuild_index(config)

        assert str(home_tree / "docs" / "recipes") not in load_index(result.index_path).paths

    @pytest.mark.skipif(not sys.platform.startswith("linux"), reason="needs byte file names")
    def test_undecodable_directory_does_not_abort_rebuild(
        self, tmp_path: Path, home_tree: Path
    ) -> None:
        """The bad name becomes a diagnostic; the index is still written."""
        # Given
        try:
            os.mkdir(os.fsencode(home_tree / "docs") + b"/caf\xe9")
        except OSError:
            pytest.skip("filesystem rejects non-UTF-8 names")

        # When
        result = rebuild_index(_config(tmp_path, home_tree))

        # Then
        assert [d.code for d in result.diagnostics] == [ErrorCode.TRAVERSAL_UNSTORABLE_NAME]
        assert load_index(result.index_path) == result.index
        assert str(home_tree / "docs" / "recipes") in result.index.paths
        assert [p.name for p in result.index_path.parent.iterdir()] == ["index"]

    def test_unicode_line_separator_in_name_round_trips(
        self, tmp_path: Path, home_tree: Path
    ) -> None:
        (home_tree / "docs" / "notes\u2028old").mkdir()

        result = rebuild_index(_config(tmp_path, home_tree))

        assert str(home_tree / "docs" / "notes\u2028old") in result.index.paths
        assert load_index(result.index_path) == result.index

    def test_rebuild_is_repeatable(self, tmp_path: Path, home_tree: Path) -> None:
        config = _config(tmp_path, home_tree)
        first = rebuild_index(config).index_path.read_bytes()
        second = rebuild_index(config).index_path.read_bytes()
        assert first == second


class TestEndToEnd:
    def test_rebuild_then_query_single_workspace(self, tmp_path: Path, make_tree) -> None:
        """Workspace with keywords, ignored junk, then one unambiguous query hit."""
        # Given
        root = make_tree(
            "work/acme/package.json",
            "work/acme/.ccd_keywords",
            "work/acme/src/index.js",
            "scratch/node_modules/left-pad/",
            contents={"work/acme/.ccd_keywords": "api\n"},
        )
        cfg_dir = tmp_path / "cfg"
        cfg_dir.mkdir()
        (cfg_dir / "ignore").write_text("node_modules\n")
        (cfg_dir / "markers").write_text("package.json\n")

        # When
        result = rebuild_index(_config(tmp_path, root))
        matches = query(load_index(result.index_path), parse_terms(["api"]))

        # Then
        paths = result.index.paths
        assert str(root / "work" / "acme") in paths
        assert str(root / "scratch") in paths
        assert str(root / "work" / "acme" / "src") not in paths
        assert not any("node_modules" in p for p in paths)
        assert [(m.path, m.keywords) for m in matches] == [
            (str(root / "work" / "acme"), frozenset({"api"}))
        ]
