"""Disambiguation of query results and the interactive Selector capability.

``disambiguate`` classifies a match list. ``choose`` turns the outcome into
at most one path:

- Direct: the single match
- NoMatch: raises NoMatchError
- Ambiguous: asks the Selector; None means the user cancelled

Selectors are picked once, at startup, by ``detect_selector``:

- FzfSelector: pipes the matches through ``fzf``
- PromptSelector: a questionary list rendered on stderr
- FirstMatchSelector: no interaction, returns the shallowest match

The first-match fallback is lossy: when several directories match, the user
gets the shallowest one, which may not be the one they meant.
"""

from __future__ import annotations

import shutil
import subprocess
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

import questionary
from prompt_toolkit.output import create_output

from ccd.config.models import SelectorConfig
from ccd.core.errors import NoMatchError, SelectorUnavailableError
from ccd.core.logging import get_logger
from ccd.index.builder import parse_index_line
from ccd.index.models import IndexEntry

log = get_logger("selector")

# fzf exit codes
_FZF_NO_MATCH = 1
_FZF_INTERRUPTED = 130


@dataclass(frozen=True, slots=True)
class Direct:
    path: str


@dataclass(frozen=True, slots=True)
class NoMatch:
    pass


@dataclass(frozen=True, slots=True)
class Ambiguous:
    matches: tuple[IndexEntry, ...]


Outcome = Direct | NoMatch | Ambiguous


def disambiguate(matches: Sequence[IndexEntry]) -> Outcome:
    if not matches:
        return NoMatch()
    if len(matches) == 1:
        return Direct(matches[0].path)
    return Ambiguous(tuple(matches))


class Selector(Protocol):
    name: str

    def select(self, matches: Sequence[IndexEntry]) -> str | None:
        """Return the chosen path, or None when the user cancels.

        Raises:
            SelectorUnavailableError: the selector cannot run.
        """
        ...


class FirstMatchSelector:
    """Deterministic, noninteractive: the first (shallowest) match.

    ``reason`` records why no interactive selector is in use; when set, every
    ambiguous pick is reported as a lossy fallback.
    """

    name = "first"

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason

    def select(self, matches: Sequence[IndexEntry]) -> str | None:
        return matches[0].path if matches else None


class FzfSelector:
    """Delegates to fzf. fzf draws on the terminal and prints the chosen line."""

    name = "fzf"

    def __init__(self, executable: str = "fzf", options: Sequence[str] = ()) -> None:
        self.executable = executable
        self.options = list(options)

    def select(self, matches: Sequence[IndexEntry]) -> str | None:
        lines = "\n".join(entry.to_line() for entry in matches) + "\n"
        try:
            proc = subprocess.run(
                [self.executable, *self.options],
                input=lines,
                stdout=subprocess.PIPE,
                text=True,
                check=False,
            )
        except OSError as e:
            raise SelectorUnavailableError.missing(self.name, e.strerror or str(e)) from e

        if proc.returncode in (_FZF_NO_MATCH, _FZF_INTERRUPTED):
            return None
        if proc.returncode != 0:
            raise SelectorUnavailableError.missing(self.name, f"exited with {proc.returncode}")

        chosen = proc.stdout.strip()
        if not chosen:
            return None
        entry = parse_index_line(chosen.splitlines()[0])
        return entry.path if entry else None


class PromptSelector:
    """Arrow-key list in the terminal. Rendered on stderr so stdout stays clean."""

    name = "prompt"

    def select(self, matches: Sequence[IndexEntry]) -> str | None:
        choices = [questionary.Choice(title=entry.to_line(), value=entry.path) for entry in matches]
        try:
            return questionary.select(
                "Multiple matches:",
                choices=choices,
                output=create_output(stdout=sys.stderr),
            ).ask()
        except (OSError, RuntimeError) as e:
            raise SelectorUnavailableError.missing(self.name, str(e)) from e


def detect_selector(config: SelectorConfig, *, stdin_isatty: bool | None = None) -> Selector:
    """Pick the selector once, from config and the environment.

    When no interactive selector is usable the result is a FirstMatchSelector
    carrying the reason; ``choose`` reports it only if a pick is actually
    ambiguous.
    """
    interactive = sys.stdin.isatty() if stdin_isatty is None else stdin_isatty
    fzf = shutil.which("fzf")
    mode = config.mode

    if mode == "first":
        return FirstMatchSelector()
    if mode in ("auto", "fzf") and fzf:
        return FzfSelector(fzf, config.fzf_options)
    if mode in ("auto", "prompt") and interactive:
        return PromptSelector()

    if mode == "fzf":
        reason = "fzf not found on PATH"
    elif mode == "prompt":
        reason = "stdin is not a terminal"
    else:
        reason = "fzf not found on PATH and stdin is not a terminal"
    log.debug("selector_unavailable", requested=mode, reason=reason)
    return FirstMatchSelector(reason)


def choose(outcome: Outcome, selector: Selector, terms: Sequence[str] = ()) -> str | None:
    """Resolve an outcome to a single path, or None on cancellation.

    Raises:
        NoMatchError: nothing matched.
    """
    if isinstance(outcome, NoMatch):
        raise NoMatchError.for_terms(list(terms))
    if isinstance(outcome, Direct):
        return outcome.path

    if isinstance(selector, FirstMatchSelector) and selector.reason:
        log.warning(
            "selector_fallback",
            selector=selector.name,
            reason=selector.reason,
            fallback=outcome.matches[0].path,
            matches=len(outcome.matches),
        )

    try:
        chosen = selector.select(outcome.matches)
    except SelectorUnavailableError as e:
        log.warning(
            "selector_fallback",
            selector=selector.name,
            reason=e.message,
            fallback=outcome.matches[0].path,
        )
        return FirstMatchSelector().select(outcome.matches)

    if chosen is None:
        log.info("selection_cancelled", selector=selector.name)
    return chosen
