"""linkdrift CLI: check linked dependencies against package.json requirements.

Entry point for the ``linkdrift`` command-line tool. Run it in the root of
an npm project; every dependency in ``node_modules`` that is a symlink to a
git working copy is checked.

Usage::

    linkdrift            # check once
    linkdrift --watch    # check, then re-check whenever a linked HEAD moves

Exit Codes:
    0 -- All checks ran (version violations are reported, not failures).
    1 -- A check failed (registry, git or manifest error).
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
from pathlib import Path

import click

from linkdrift import __version__
from linkdrift.checker import Project, Reporter
from linkdrift.cli.output import ConsoleReporter, print_fatal
from linkdrift.exceptions import LinkDriftError
from linkdrift.watch import check_and_watch

logger = logging.getLogger(__name__)


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    """Set *stop_event* on SIGINT/SIGTERM where the loop supports it."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError):
            # Windows loops lack signal handlers; Ctrl+C cancels the run instead.
            logger.debug("Cannot install handler for %s", sig)


async def _run(project: Project, reporter: Reporter, watch: bool) -> None:
    stop_event = asyncio.Event()
    if watch:
        _install_signal_handlers(stop_event)
    await check_and_watch(project, reporter, watch=watch, stop_event=stop_event)


@click.command("linkdrift")
@click.version_option(version=__version__)
@click.option(
    "--watch", "-w",
    is_flag=True,
    default=False,
    help="Check again whenever the git HEAD of a linked package changes.",
)
def cli(watch: bool) -> None:
    """Check that linked dependencies match package.json requirements.

    For every dependency in node_modules that is a symlink, finds the
    closest published release its git HEAD is based on and reports whether
    that release satisfies the range declared in package.json.
    """
    project_dir = Path.cwd()
    project = Project.load(project_dir, Path.home(), os.environ)
    try:
        asyncio.run(_run(project, ConsoleReporter(project_dir), watch))
    except LinkDriftError as exc:
        print_fatal(exc)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)


def main() -> None:
    """Console-script entry point."""
    cli()
