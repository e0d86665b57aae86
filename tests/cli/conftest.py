"""Shared fixtures for CLI tests."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest
from click.testing import CliRunner, Result

from ccd.cli.main import cli


@dataclass
class CliEnv:
    """Isolated ccd setup: config file, tree to index, index location."""

    runner: CliRunner
    config_path: Path
    root: Path
    index_path: Path
    cfg_dir: Path

    def invoke(self, *args: str) -> Result:
        return self.runner.invoke(cli, ["--config", str(self.config_path), *args])


@pytest.fixture
def cli_env(tmp_path: Path, make_tree, monkeypatch: pytest.MonkeyPatch) -> CliEnv:
    for var in ("CCD_CONFIG", "CCD__LOGGING__LEVEL", "CCD__SELECTOR__MODE", "CCD__INDEX__ROOT"):
        monkeypatch.delenv(var, raising=False)

    root = make_tree(
        "apps/zebra-site/package.json",
        "apps/zebra-site/src/widgets/",
        "apps/quokka/.ccd_keywords",
        "notes/quokka-facts/",
        contents={"apps/quokka/.ccd_keywords": "marsupial\n"},
    )
    cfg_dir = tmp_path / "cfg"
    cfg_dir.mkdir()
    index_path = tmp_path / "cache" / "index"
    config_path = cfg_dir / "config.yaml"
    config_path.write_text(
        "index:\n"
        f"  root: {root}\n"
        f"  index_path: {index_path}\n"
        "patterns:\n"
        f"  ignore_file: {cfg_dir / 'ignore'}\n"
        f"  markers_file: {cfg_dir / 'markers'}\n"
        "selector:\n"
        "  mode: first\n"
    )
    return CliEnv(
        runner=CliRunner(),
        config_path=config_path,
        root=root,
        index_path=index_path,
        cfg_dir=cfg_dir,
    )


@pytest.fixture
def indexed_env(cli_env: CliEnv) -> CliEnv:
    """cli_env with the index already built."""
    result = cli_env.invoke("rebuild")
    assert result.exit_code == 0, result.output
    return cli_env
