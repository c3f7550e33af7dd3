"""Rich output formatting for the linkdrift CLI.

Every line starts with a colored status marker, and package names, versions
and ranges are printed bold:

    success = green, error/fatal = red, warning = yellow, info/watch = cyan
"""

from __future__ import annotations

import os
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from linkdrift.checker import CheckResult, Reporter
from linkdrift.core.compatibility import (
    REASON_INVALID_RANGE,
    REASON_NOT_DECLARED,
    REASON_NOT_IN_REGISTRY,
    REASON_NO_RELEASED_VERSION,
    CompatibilityVerdict,
    VerdictStatus,
)
from linkdrift.discovery import LinkedDependency
from linkdrift.manifest import MANIFEST_NAME

_MARKERS: dict[str, str] = {
    "success": "[bold green]✔  success[/bold green]",
    "error": "[bold red]✖  error[/bold red]  ",
    "warning": "[bold yellow]⚠  warning[/bold yellow]",
    "info": "[bold cyan]ℹ  info[/bold cyan]   ",
    "watch": "[bold cyan]…  watch[/bold cyan]  ",
    "fatal": "[bold red]✖  fatal[/bold red]  ",
}

console = Console()


def _b(text: object) -> str:
    return f"[bold]{escape(str(text))}[/bold]"


def print_line(kind: str, message: str) -> None:
    """Print *message* (Rich markup) behind the marker for *kind*."""
    console.print(f"{_MARKERS[kind]}  {message}", soft_wrap=True, highlight=False)


def _unresolvable_message(name: str, verdict: CompatibilityVerdict) -> str:
    reason = verdict.reason
    if reason == REASON_NOT_IN_REGISTRY:
        return f"Package {_b(name)} not found in npm registry"
    if reason == REASON_NO_RELEASED_VERSION:
        return f"Did not find any released version for linked package {_b(name)}"
    if reason == REASON_NOT_DECLARED:
        return (
            f"Linked package {_b(name)} is based on {_b(verdict.version)}, "
            f"but is not declared in {MANIFEST_NAME}"
        )
    if reason == REASON_INVALID_RANGE:
        return (
            f"Linked package {_b(name)} is based on {_b(verdict.version)}, "
            f"but {MANIFEST_NAME} requirement {_b(verdict.range)} is not a semver range"
        )
    return f"Cannot check linked package {_b(name)}: {escape(str(reason))}"


def print_result(result: CheckResult, project_dir: Path) -> None:
    """Print the verdict of one check, with a remediation hint on violations.

    Args:
        result: The check result.
        project_dir: Base for showing the linked repository path relatively.
    """
    name = result.dependency.name
    verdict = result.verdict
    if verdict.status is VerdictStatus.SATISFIED:
        print_line(
            "success",
            f"Linked repository for package {_b(name)} is based on {_b(verdict.version)}, "
            f"which is compatible with {MANIFEST_NAME} requirement {_b(verdict.range)}",
        )
    elif verdict.status is VerdictStatus.VIOLATED:
        print_line(
            "error",
            f"Linked repository for package {_b(name)} is based on {_b(verdict.version)}, "
            f"but {MANIFEST_NAME} requires {_b(verdict.range)}",
        )
        relative = os.path.relpath(result.repo_root, project_dir)
        if verdict.minimum_commit:
            print_line(
                "error",
                f"Update {_b(relative)} at least to commit {_b(verdict.minimum_commit)} "
                f"(release {_b(verdict.minimum_version)})",
            )
        elif verdict.minimum_version:
            print_line(
                "error",
                f"Update {_b(relative)} at least to release {_b(verdict.minimum_version)}",
            )
    else:
        print_line("warning", _unresolvable_message(name, verdict))


def print_fatal(error: BaseException) -> None:
    """Print an error that aborts the run."""
    print_line("fatal", escape(str(error)))


class ConsoleReporter(Reporter):
    """Reports check progress on the terminal.

    Args:
        project_dir: The consuming project's root directory.
    """

    def __init__(self, project_dir: Path) -> None:
        self.project_dir = project_dir

    def result(self, result: CheckResult) -> None:
        print_result(result, self.project_dir)

    def head_changed(self, dependency: LinkedDependency) -> None:
        print_line("info", f"Git HEAD change detected for linked package {_b(dependency.name)}")

    def watching(self) -> None:
        print_line("watch", "Watching for git HEAD changes")
