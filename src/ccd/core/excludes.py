"""Built-in baseline ignore patterns and workspace markers.

Used whenever the user's ignore / marker files are absent or unusable.

Ignore patterns are regular expressions searched against the absolute path
of a directory. The baseline entries are anchored to a single path segment
(``/name$``) so they only ever prune the directory they name, never a
directory that merely sits somewhere below one.
"""

from __future__ import annotations

import re

# =============================================================================
# Directory names pruned by default
# =============================================================================
# Organized by ecosystem for maintainability. Hidden directories are covered
# by a separate pattern below.

DEFAULT_PRUNED_DIR_NAMES: frozenset[str] = frozenset(
    (
        # JavaScript/Node.js
        "node_modules",
        "bower_components",
        # Python
        "venv",
        "virtualenv",
        "__pycache__",
        "site-packages",
        "htmlcov",
        # Rust / JVM / Elixir build output
        "target",
        "_build",
        "deps",
        # .NET
        "bin",
        "obj",
        # iOS/macOS
        "Pods",
        "DerivedData",
        # Generic build/output directories
        "dist",
        "build",
        "coverage",
        "vendor",
        # macOS user folders that are never projects
        "Library",
        "Applications",
    )
)

HIDDEN_DIR_PATTERN = r"/\.[^/]*$"
"""Any directory whose own name starts with a dot (.git, .cache, .venv...)."""

DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    HIDDEN_DIR_PATTERN,
    *(rf"/{re.escape(name)}$" for name in sorted(DEFAULT_PRUNED_DIR_NAMES)),
)

# =============================================================================
# Workspace markers
# =============================================================================
# Exact base names. Presence inside a directory makes it a workspace root.

DEFAULT_MARKER_NAMES: frozenset[str] = frozenset(
    (
        # VCS
        ".git",
        ".hg",
        ".svn",
        # JavaScript/Node.js
        "package.json",
        "deno.json",
        # Python
        "pyproject.toml",
        "setup.py",
        # Rust / Go
        "Cargo.toml",
        "go.mod",
        # JVM
        "pom.xml",
        "build.gradle",
        "build.gradle.kts",
        # Ruby / PHP / Elixir
        "Gemfile",
        "composer.json",
        "mix.exs",
        # C/C++
        "CMakeLists.txt",
    )
)

_IGNORE_TEMPLATE_HEADER = """\
# ccd ignore patterns
# One regular expression per line, searched against the absolute path of
# each directory. A matching directory is skipped and never entered.
# Blank lines and lines starting with '#' are ignored.
#
# Examples:
#   /node_modules$      prune every node_modules directory
#   ^/home/me/archive$  prune one specific tree
"""

_MARKERS_TEMPLATE_HEADER = """\
# ccd workspace markers
# One exact file or directory name per line (no wildcards). A directory
# containing any of these is indexed as a single entry; its subdirectories
# are folded into it.
# Blank lines and lines starting with '#' are ignored.
"""


def generate_ignore_template() -> str:
    body = "\n".join(DEFAULT_IGNORE_PATTERNS)
    return f"{_IGNORE_TEMPLATE_HEADER}\n{body}\n"


def generate_markers_template() -> str:
    body = "\n".join(sorted(DEFAULT_MARKER_NAMES))
    return f"{_MARKERS_TEMPLATE_HEADER}\n{body}\n"


__all__ = [
    "DEFAULT_PRUNED_DIR_NAMES",
    "DEFAULT_IGNORE_PATTERNS",
    "DEFAULT_MARKER_NAMES",
    "HIDDEN_DIR_PATTERN",
    "generate_ignore_template",
    "generate_markers_template",
]
