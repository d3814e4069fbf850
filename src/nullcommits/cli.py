"""
Command line interface for nullcommits.

This module defines the ``main`` command group used as the entry point
of the ``nullcommits`` command. ``process`` is invoked by the
``prepare-commit-msg`` hook; ``preview`` shows the diff that would be
sent to the language model; ``config`` manages the diff budget.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import click

from nullcommits import __version__
from nullcommits.config.loader import (
    DEFAULT_CONFIG,
    ConfigError,
    format_budget,
    load_config,
    parse_budget,
    resolve_diff_budget,
    save_diff_budget,
)
from nullcommits.diff.diff_extractor import collect_staged_diff
from nullcommits.hook_runner import process_commit_message
from nullcommits.llm.commit_message_generator import CommitMessageGenerator
from nullcommits.llm.openai_client import LLMError, OpenAIClient
from nullcommits.vcs.git_client import GitClient

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_NO_REPO = 3
EXIT_CONFIG_ERROR = 5
EXIT_LLM_FAILURE = 7

SMALL_BUDGET_WARNING = 1000
LARGE_BUDGET_WARNING = 500_000


def print_info(message: str, indent: int = 0):
    """Print an info message."""
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}")


def print_success(message: str, indent: int = 0):
    """Print a success message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✓ {message}")


def print_warning(message: str, indent: int = 0):
    """Print a warning message."""
    prefix = "  " * indent
    click.echo(f"{prefix}⚠ {message}")


def print_error(message: str, indent: int = 0):
    """Print an error message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✗ {message}", err=True)


def open_repository() -> GitClient:
    """Return a client for the repository containing the current directory.

    Raises
    ------
    click.exceptions.Exit
        With code EXIT_NO_REPO if no Git repository is found.
    """
    repo_root = GitClient.find_repo_root(Path.cwd())
    if repo_root is None:
        print_error("Not a git repository. Please run this command inside a git repository.")
        raise click.exceptions.Exit(EXIT_NO_REPO)
    logger.debug("Repository root: %s", repo_root)
    return GitClient(repo_root)


def budget_from_option(diff_budget: Optional[str]) -> int:
    try:
        return resolve_diff_budget(diff_budget)
    except ConfigError as exc:
        print_error(f"Configuration error: {exc}")
        raise click.exceptions.Exit(EXIT_CONFIG_ERROR)


diff_budget_option = click.option(
    "--diff-budget",
    "diff_budget",
    default=None,
    metavar="CHARS",
    help="Maximum diff characters sent to the model (e.g. 64000 or 64K).",
)
jobs_option = click.option(
    "--jobs",
    "-j",
    default=1,
    show_default=True,
    type=click.IntRange(min=1),
    help="Number of per-file diffs fetched concurrently.",
)


@click.group()
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="nullcommits")
def main(verbose: bool) -> None:
    """AI-powered git commit message enhancer."""
    # Use force=True so handlers are reconfigured on subsequent invocations.
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )
    # Module loggers do not propagate until logging is configured here.
    for name, module_logger in logging.root.manager.loggerDict.items():
        if name.startswith("nullcommits") and isinstance(module_logger, logging.Logger):
            module_logger.propagate = True


def build_generator() -> CommitMessageGenerator:
    """Create the message generator from the user configuration.

    Raises
    ------
    ConfigError
        If the configuration is invalid or no API key is set.
    """
    config = load_config()
    return CommitMessageGenerator(
        OpenAIClient(
            api_key=config["apiKey"],
            model=config["model"],
            base_url=config["baseUrl"],
            request_timeout=float(config["requestTimeout"]),
        )
    )


@main.command()
@click.argument("msg_file", type=click.Path(dir_okay=False, path_type=Path))
@diff_budget_option
@jobs_option
def process(msg_file: Path, diff_budget: Optional[str], jobs: int) -> None:
    """Rewrite the commit message in MSG_FILE (used by the git hook)."""
    client = open_repository()
    budget = budget_from_option(diff_budget)
    try:
        rewritten = process_commit_message(
            msg_file, client, build_generator, diff_budget=budget, max_workers=jobs
        )
    except ConfigError as exc:
        print_error(f"Configuration error: {exc}")
        raise click.exceptions.Exit(EXIT_CONFIG_ERROR)
    except FileNotFoundError as exc:
        print_error(f"nullcommits error: {exc}")
        raise click.exceptions.Exit(EXIT_GENERIC_ERROR)
    except LLMError as exc:
        print_error(f"nullcommits error: {exc}")
        raise click.exceptions.Exit(EXIT_LLM_FAILURE)

    if rewritten:
        print_success("Commit message enhanced")


@main.command()
@diff_budget_option
@jobs_option
def preview(diff_budget: Optional[str], jobs: int) -> None:
    """Show the diff that would be sent to the language model."""
    client = open_repository()
    budget = budget_from_option(diff_budget)
    result = collect_staged_diff(client, total_budget=budget, max_workers=jobs)
    if result.is_empty:
        print_warning("No staged changes detected.")
        return
    click.echo(result.diff)
    click.echo("")
    print_info(f"Files: {result.file_count}")
    print_info(f"Lines changed: {result.total_lines_changed}")
    print_info(f"Diff size: {len(result.diff)} characters (budget {format_budget(budget)})")


@main.group()
def config() -> None:
    """Manage nullcommits configuration."""


@config.command("set-diff-budget")
@click.argument("budget")
def set_diff_budget(budget: str) -> None:
    """Set max characters for the diff (e.g. 128000 or 128K)."""
    try:
        parsed = parse_budget(budget)
        path = save_diff_budget(parsed)
    except ConfigError as exc:
        print_error(str(exc))
        raise click.exceptions.Exit(EXIT_CONFIG_ERROR)

    if parsed < SMALL_BUDGET_WARNING:
        print_warning("Very small budget may result in highly truncated diffs.")
    if parsed > LARGE_BUDGET_WARNING:
        print_warning("Very large budget may exceed API token limits.")
    print_success(f"Diff budget set to {parsed} characters ({format_budget(parsed)})")
    print_info(f"Config file: {path}", indent=1)


@config.command("show-diff-budget")
def show_diff_budget() -> None:
    """Show the current diff budget setting."""
    try:
        budget = resolve_diff_budget()
    except ConfigError as exc:
        print_error(str(exc))
        raise click.exceptions.Exit(EXIT_CONFIG_ERROR)

    print_info(f"Current diff budget: {budget} characters ({format_budget(budget)})")
    if budget == DEFAULT_CONFIG["diffBudget"]:
        print_info("(using default value)", indent=1)
    click.echo("")
    click.echo("Change with: nullcommits config set-diff-budget <value>")
    click.echo("   Examples: 64000, 128K, 256000")
