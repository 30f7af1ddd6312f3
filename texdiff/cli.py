"""
Command-line interface for texdiff.
"""

import logging
import sys

import click
from rich.console import Console
from rich.markup import escape

from texdiff import __version__
from texdiff.builder import DiffBuilder
from texdiff.cleaner import ArtifactCleaner
from texdiff.config import (
    BIBTEX,
    DEFAULT_BIBLIOGRAPHY,
    DEFAULT_OUTPUT_NAME,
    DEFAULT_SOURCE_NAME,
    LATEXDIFF,
    PDFLATEX,
    CleanConfig,
    DiffConfig,
)
from texdiff.exceptions import TexDiffException
from texdiff.reporter import ConsoleReporter
from texdiff.utils import get_logger

console = Console(highlight=False)


def _configure_logging(verbose):
    get_logger("texdiff", logging.DEBUG if verbose else logging.WARNING)


def _fail(exc):
    console.print(f"\n[bold red]✗ Error:[/bold red] {escape(str(exc))}")
    sys.exit(1)


def _workdir_option(func):
    return click.option(
        '--workdir', '-C',
        default='.',
        help='Directory holding the sources and receiving the outputs',
        type=click.Path(exists=True, file_okay=False),
    )(func)


def _verbose_option(func):
    return click.option(
        '--verbose', '-v',
        is_flag=True,
        help='Log every external command to stderr',
    )(func)


def build_options(func):
    """Arguments and options shared by ``texdiff build`` and ``diff-builder``."""

    decorators = [
        click.argument('old_dir', required=False),
        click.argument('new_dir', required=False),
        click.argument('output_name', required=False),
        _workdir_option,
        click.option(
            '--source-name', '-s',
            default=DEFAULT_SOURCE_NAME,
            show_default=True,
            help='Canonical source file inside each version directory',
        ),
        click.option(
            '--bibliography', '-b',
            default=DEFAULT_BIBLIOGRAPHY,
            show_default=True,
            help='Bibliography resource restored after flattening',
        ),
        click.option(
            '--latexdiff',
            default=LATEXDIFF,
            envvar='TEXDIFF_LATEXDIFF',
            show_default=True,
            help='latexdiff executable',
        ),
        click.option(
            '--pdflatex',
            default=PDFLATEX,
            envvar='TEXDIFF_PDFLATEX',
            show_default=True,
            help='pdflatex executable',
        ),
        click.option(
            '--bibtex',
            default=BIBTEX,
            envvar='TEXDIFF_BIBTEX',
            show_default=True,
            help='bibtex executable',
        ),
        click.option(
            '--latexdiff-arg', 'latexdiff_args',
            multiple=True,
            help='Extra argument passed to latexdiff (repeatable)',
        ),
        _verbose_option,
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def clean_options(func):
    """Options shared by ``texdiff clean`` and ``artifact-cleaner``."""

    decorators = [
        _workdir_option,
        click.option(
            '--diff-name', '-n',
            default=DEFAULT_OUTPUT_NAME,
            show_default=True,
            help='Base name of the diff outputs',
        ),
        click.option(
            '--source-name', '-s',
            default=DEFAULT_SOURCE_NAME,
            show_default=True,
            help='Canonical source file that is always kept',
        ),
        click.option(
            '--interactive/--no-interactive',
            default=None,
            help='Ask before deleting (default: only when stdin is a terminal)',
        ),
        click.option(
            '--yes', '-y',
            is_flag=True,
            help='Do not ask for confirmation',
        ),
        _verbose_option,
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def run_build(old_dir, new_dir, output_name, workdir, source_name, bibliography,
              latexdiff, pdflatex, bibtex, latexdiff_args, verbose):
    _configure_logging(verbose)
    try:
        config = DiffConfig.from_options(
            old_dir,
            new_dir,
            output_name,
            workdir=workdir,
            latexdiff_args=latexdiff_args,
            source_name=source_name,
            bibliography=bibliography,
            latexdiff=latexdiff,
            pdflatex=pdflatex,
            bibtex=bibtex,
        )
        result = DiffBuilder(config, reporter=ConsoleReporter(console)).build()
    except (TexDiffException, OSError, ValueError) as e:
        _fail(e)

    console.print()
    sys.exit(result.exit_code)


def run_clean(workdir, diff_name, source_name, interactive, yes, verbose):
    _configure_logging(verbose)
    if yes:
        interactive = False
    elif interactive is None:
        interactive = sys.stdin.isatty()

    try:
        config = CleanConfig(workdir=workdir, diff_name=diff_name, source_name=source_name)
        cleaner = ArtifactCleaner(
            config,
            ConsoleReporter(console),
            interactive=interactive,
            confirm=lambda prompt: click.confirm(prompt, default=False),
        )
        cleaner.clean()
    except (TexDiffException, OSError) as e:
        _fail(e)

    console.print()


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    texdiff - Build marked-up LaTeX diff PDFs and clean up after them.
    """
    pass


@cli.command(name="build")
@build_options
def build(**options):
    """
    Create a PDF marking the changes between two LaTeX versions.

    OLD_DIR defaults to v1, NEW_DIR to the working directory and
    OUTPUT_NAME to root-diff. Each version directory must contain root.tex.

    Examples:

        texdiff build

        texdiff build v2 v3

        texdiff build v1 . paper-diff
    """
    run_build(**options)


@cli.command(name="clean")
@clean_options
def clean(**options):
    """
    Remove root-diff.* and root.* build artifacts.

    root.tex and every PDF are always kept.

    Examples:

        texdiff clean

        texdiff clean --yes
    """
    run_clean(**options)


@click.command(name="diff-builder")
@click.version_option(version=__version__)
@build_options
def diff_builder(**options):
    """
    Create a PDF marking the changes between two LaTeX versions.
    """
    run_build(**options)


@click.command(name="artifact-cleaner")
@click.version_option(version=__version__)
@clean_options
def artifact_cleaner(**options):
    """
    Remove root-diff.* and root.* build artifacts, keeping root.tex and PDFs.
    """
    run_clean(**options)


if __name__ == "__main__":  # pragma: no cover
    cli()
