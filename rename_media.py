#!/usr/bin/env python3
"""
Media Rename CLI

Renames photo and video files by the date and time they were taken, after
refusing to run if any two input files are identical.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from colorama import Fore, Style, init

from media_renamer import (
    Config,
    DigestIndex,
    DuplicateDetector,
    DuplicateFilesError,
    FileScanner,
    RenameExecutor,
    RenamerError,
    RenameReporter,
    create_reader,
)
from media_renamer.config import METADATA_READERS

# Initialize colorama for cross-platform colored output
init()

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(level: str = 'INFO', log_file: Optional[str] = None):
    """Set up logging configuration."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    # Diagnostics go to stderr, stdout carries dry-run output only
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Reduce noise from libraries
    logging.getLogger('exiftool').setLevel(logging.WARNING)
    logging.getLogger('exifread').setLevel(logging.WARNING)


def print_header(title: str):
    """Print a formatted header."""
    click.echo(f"\n{Fore.CYAN}{'=' * 60}{Style.RESET_ALL}", err=True)
    click.echo(f"{Fore.CYAN}{title.center(60)}{Style.RESET_ALL}", err=True)
    click.echo(f"{Fore.CYAN}{'=' * 60}{Style.RESET_ALL}\n", err=True)


def print_success(message: str):
    """Print success message."""
    click.echo(f"{Fore.GREEN}OK: {message}{Style.RESET_ALL}", err=True)


def print_warning(message: str):
    """Print warning message."""
    click.echo(f"{Fore.YELLOW}WARN: {message}{Style.RESET_ALL}", err=True)


def print_error(message: str):
    """Print error message."""
    click.echo(f"{Fore.RED}ERROR: {message}{Style.RESET_ALL}", err=True)


def print_info(message: str):
    """Print info message."""
    click.echo(f"{Fore.BLUE}INFO: {message}{Style.RESET_ALL}", err=True)


def print_duplicates(error: DuplicateFilesError):
    """Print every duplicate pair."""
    print_error(f"{len(error.pairs)} duplicate file pairs found:")
    for pair in error.pairs:
        click.echo(f"  {pair.first}\t{pair.second}", err=True)
    print_error("Please delete all duplicates before proceeding")


@click.group()
@click.option('--config', '-c', 'config_path', type=click.Path(dir_okay=False),
              help='Path to configuration file')
@click.option('--log-level', '-l', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Logging level')
@click.option('--log-file', type=click.Path(dir_okay=False), help='Also log to this file')
@click.option('--debug', is_flag=True, help='Print debugging information')
@click.pass_context
def cli(ctx, config_path, log_level, log_file, debug):
    """Media Rename Tool - rename photos and videos by date and time."""
    ctx.ensure_object(dict)
    ctx.obj['overrides'] = {
        'logging.level': log_level,
        'logging.file': log_file,
        'logging.debug': debug or None,
    }
    ctx.obj['config_path'] = config_path


def load_config(ctx, overrides) -> Config:
    """Load configuration with CLI overrides and set up logging."""
    all_overrides = dict(ctx.obj['overrides'])
    all_overrides.update(overrides)

    try:
        config = Config(ctx.obj['config_path'], all_overrides)
    except Exception as e:
        print_error(f"Failed to load configuration: {e}")
        sys.exit(1)

    setup_logging(config.get_log_level(), config.get_log_file())
    return config


@cli.command()
@click.argument('input_dirs', nargs=-1, required=True,
                type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option('--output-dir', '-o', help='Base output directory')
@click.option('--extra-dir', help='Extra subdirectory below each month directory')
@click.option('--extra-suffix', help='Extra suffix appended to every filename')
@click.option('--no-exif-prefix', help='Filename prefix for files without a timestamp')
@click.option('--zero-pad', type=int, default=None, help='Zero-pad width for ordinals (default 3)')
@click.option('--use-filename-for-timestamp', is_flag=True,
              help='Parse the timestamp from the filename when no tag has one')
@click.option('--check-file-modify-date', is_flag=True,
              help='Fall back to the file modification date tag')
@click.option('--dry-run', is_flag=True, help="Don't rename any files")
@click.option('--jobs', '-j', type=int, default=None, help='Parallel duplicate comparisons')
@click.option('--reader', type=click.Choice(METADATA_READERS), default=None,
              help='Metadata reader backend (default exiftool)')
@click.option('--duplicate-report', type=click.Path(dir_okay=False),
              help='Write duplicate pairs to this file')
@click.option('--report', '-r', type=click.Path(dir_okay=False), help='Save summary report to file')
@click.pass_context
def rename(ctx, input_dirs, output_dir, extra_dir, extra_suffix, no_exif_prefix, zero_pad,
           use_filename_for_timestamp, check_file_modify_date, dry_run, jobs, reader,
           duplicate_report, report):
    """Rename files in INPUT_DIRS into the output directory tree."""
    config = load_config(ctx, {
        'rename.output_dir': output_dir,
        'rename.extra_dir': extra_dir,
        'rename.extra_suffix': extra_suffix,
        'rename.no_exif_prefix': no_exif_prefix,
        'rename.zero_pad': zero_pad,
        'rename.use_filename_for_timestamp': use_filename_for_timestamp or None,
        'rename.check_file_modify_date': check_file_modify_date or None,
        'rename.dry_run': dry_run or None,
        'process.parallel_jobs': jobs,
        'process.metadata_reader': reader,
        'process.duplicate_report': duplicate_report,
    })

    if not config.get_output_dir():
        raise click.UsageError("--output-dir must be specified", ctx=ctx)

    errors = config.validate_config()
    if errors:
        print_error("Configuration validation failed:")
        for error in errors:
            click.echo(f"  - {error}", err=True)
        sys.exit(2)

    def echo_move(source: Path, destination: Path):
        click.echo(f"{source}\t{destination}")

    print_header("MEDIA RENAME")
    if config.is_dry_run():
        print_info("Running in DRY RUN mode - no files will be moved")

    try:
        with create_reader(config.get_metadata_reader()) as metadata_reader:
            executor = RenameExecutor(
                config,
                metadata_reader,
                on_planned=echo_move if config.is_dry_run() else None,
            )
            results = executor.run(input_dirs)
    except DuplicateFilesError as e:
        print_duplicates(e)
        sys.exit(1)
    except RenamerError as e:
        print_error(f"Rename failed: {e}")
        sys.exit(1)

    stats = results['statistics']
    if stats['skipped_unknown_type'] or stats['skipped_no_timestamp']:
        print_warning(f"Skipped {stats['skipped_unknown_type']:,} unknown and "
                      f"{stats['skipped_no_timestamp']:,} undated files")
    print_success(f"{stats['renamed']:,} of {stats['discovered']:,} files "
                  f"{'would be renamed' if results['dry_run'] else 'renamed'}")

    reporter = RenameReporter(config)
    if report:
        report_file = reporter.save_report(results, report)
        print_success(f"Report saved: {report_file}")
    click.echo("\n" + reporter.generate_summary_report(results), err=True)


@cli.command('check-duplicates')
@click.argument('input_dirs', nargs=-1, required=True,
                type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option('--jobs', '-j', type=int, default=None, help='Parallel duplicate comparisons')
@click.option('--duplicate-report', type=click.Path(dir_okay=False),
              help='Write duplicate pairs to this file')
@click.pass_context
def check_duplicates(ctx, input_dirs, jobs, duplicate_report):
    """Only look for identical files in INPUT_DIRS."""
    config = load_config(ctx, {
        'process.parallel_jobs': jobs,
        'process.duplicate_report': duplicate_report,
    })

    print_header("DUPLICATE CHECK")

    try:
        records = FileScanner().discover(input_dirs)
        DuplicateDetector(config, DigestIndex()).check(records)
    except DuplicateFilesError as e:
        print_duplicates(e)
        sys.exit(1)
    except RenamerError as e:
        print_error(f"Duplicate check failed: {e}")
        sys.exit(1)

    print_success(f"No duplicates among {len(records):,} files")


if __name__ == '__main__':
    cli()
