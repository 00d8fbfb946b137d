"""Command-line interface for dated backups."""

import logging
import sys
import click
from typing import Optional

from .core.backup import DatedBackup
from .core.errors import BackupError
from .core.models import Operation, SyncAction
from .config.config_manager import ConfigManager
from .utils.formatters import format_date, format_duration

# Failures reported to the operator as "Error: ..." with exit status 1
HANDLED_ERRORS = (BackupError, ValueError, FileNotFoundError)

TIMESTAMP_FORMATS = ['%Y-%m-%d %H:%M', '%Y-%m-%d %H:%M:%S', '%Y-%m-%dT%H:%M:%S']


def setup_logging(level: str, log_file: Optional[str] = None):
    """Set up logging configuration."""
    # Convert string level to logging constant
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {level}')

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Set up root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Add console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Add file handler if specified
    if log_file:
        try:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            click.echo(f"Warning: Could not set up file logging: {e}", err=True)


def _fail(error: BaseException):
    """Print an error with its chain of causes and exit."""
    click.echo(f"Error: {error}", err=True)
    cause = error.__cause__
    while cause is not None:
        click.echo(f"  Caused by: {cause}", err=True)
        cause = cause.__cause__
    sys.exit(1)


def _resolve_now(at):
    """Attach the local offset to a naive --at timestamp, or read the clock."""
    if at is None:
        return None
    return at.astimezone()


def _describe_action(action: SyncAction) -> str:
    operation = action.operation
    if operation is Operation.SYNCHRONIZE_DIRECTORY:
        return f"Synchronize {action.source_path!r} with {str(action.destination_path)!r}"
    elif operation is Operation.REMOVE_DESTINATION_FILE_THEN_SYNCHRONIZE_DIRECTORY:
        return (f"Remove the file {str(action.destination_path)!r}, then synchronize "
                f"{action.source_path!r} with it")
    elif operation is Operation.COPY_FILE:
        return f"Copy the file {action.source_path!r} to {str(action.destination_path)!r}"
    elif operation is Operation.REMOVE_DESTINATION_DIRECTORY_THEN_COPY_FILE:
        return (f"Remove the directory {str(action.destination_path)!r}, then copy the file "
                f"{action.source_path!r} to it")
    raise ValueError(f"Unknown operation: {operation!r}")


@click.group()
@click.option('--config', '-c', 'config_path',
              help='Path to configuration file')
@click.option('--log-level', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Logging level (overrides the configuration file)')
@click.option('--log-file',
              help='Log file path (overrides the configuration file)')
@click.pass_context
def cli(ctx, config_path: Optional[str], log_level: Optional[str], log_file: Optional[str]):
    """Dated Backup - mirror directories into dated backups with rsync."""

    # Ensure context exists
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path
    ctx.obj['log_level'] = log_level
    ctx.obj['log_file'] = log_file


def _config_manager(ctx) -> ConfigManager:
    """Load the configuration and set up logging on first use."""
    if 'config_manager' not in ctx.obj:
        config_manager = ConfigManager(ctx.obj['config_path'])
        try:
            config_manager.load_config()
        except HANDLED_ERRORS as e:
            _fail(e)

        logging_config = config_manager.get_logging_config()
        setup_logging(ctx.obj['log_level'] or logging_config.get('level', 'INFO'),
                      ctx.obj['log_file'] or logging_config.get('file'))
        ctx.obj['config_manager'] = config_manager
    return ctx.obj['config_manager']


@cli.command()
@click.argument('source_dir')
@click.argument('destination_dir', type=click.Path())
@click.option('--at', type=click.DateTime(formats=TIMESTAMP_FORMATS), default=None,
              help='Time used for the dated name instead of now')
@click.option('--dry-run', is_flag=True, help='Only show what would be done')
@click.pass_context
def backup(ctx, source_dir: str, destination_dir: str, at, dry_run: bool):
    """Mirror SOURCE_DIR into DESTINATION_DIR/<name>_YYYY-MM-DD-HHhMM.

    The previous dated backup of SOURCE_DIR, if there is exactly one, is
    renamed first so that rsync only transfers what changed.
    """
    try:
        runner = DatedBackup(config_manager=_config_manager(ctx))
        result = runner.run_backup(source_dir, destination_dir, now=_resolve_now(at), dry_run=dry_run)
    except HANDLED_ERRORS as e:
        _fail(e)

    prefix = "Would" if dry_run else "--->"
    if result.renamed_from is not None:
        click.echo(f"{prefix} rename {str(result.renamed_from)!r} to {str(result.destination_path)!r}.")
    click.echo(f"{prefix} synchronize {result.source_path!r} with {str(result.destination_path)!r}.")
    if result.elapsed_seconds is not None:
        click.echo(f"Elapsed time: {format_duration(result.elapsed_seconds)}.")
    click.echo(str(result.destination_path))


@cli.command('sync-partial')
@click.argument('source_prefix')
@click.argument('destination_prefix', type=click.Path())
@click.argument('subpaths', nargs=-1)
@click.option('--dry-run', is_flag=True, help='Only show what would be done')
@click.pass_context
def sync_partial(ctx, source_prefix: str, destination_prefix: str, subpaths, dry_run: bool):
    """Synchronize SUBPATHS of SOURCE_PREFIX into DESTINATION_PREFIX.

    For example, if /aaa/bbb/foo is a file and /aaa/bbb/bar/baz a directory,
    `sync-partial /aaa/bbb /xxx/yyy foo bar/baz` copies /aaa/bbb/foo to
    /xxx/yyy/foo and mirrors /aaa/bbb/bar/baz/ into /xxx/yyy/bar/baz.
    Every subpath is checked before anything is modified.
    """
    try:
        runner = DatedBackup(config_manager=_config_manager(ctx))
        outcome = runner.run_partial_sync(
            source_prefix, destination_prefix, list(subpaths), dry_run=dry_run,
            on_start=lambda action: click.echo(f"---> {_describe_action(action)}."),
            on_result=lambda result: click.echo(f"Elapsed time: {format_duration(result.elapsed_seconds)}."),
        )
    except HANDLED_ERRORS as e:
        _fail(e)

    if dry_run:
        for action in outcome['actions']:
            description = _describe_action(action)
            click.echo(f"Would {description[0].lower()}{description[1:]}.")
        return

    click.echo(f"\n🕒 Completed at: {format_date(outcome['timestamp'])}")


@cli.command()
@click.argument('paths', nargs=-1, required=True)
@click.option('--at', type=click.DateTime(formats=TIMESTAMP_FORMATS), default=None,
              help='Time used for the dated names instead of now')
@click.option('--dry-run', is_flag=True, help='Only show what would be done')
@click.pass_context
def snapshot(ctx, paths, at, dry_run: bool):
    """Copy each of PATHS next to itself as <name>_YYYY-MM-DD-HHhMM."""
    try:
        runner = DatedBackup(config_manager=_config_manager(ctx))
        results = runner.run_snapshot(list(paths), now=_resolve_now(at), dry_run=dry_run)
    except HANDLED_ERRORS as e:
        _fail(e)

    for result in results:
        source, destination = result.action.source_path, result.action.destination_path
        if result.elapsed_seconds is None:
            click.echo(f"Would copy {str(source)!r} to {str(destination)!r}.")
        else:
            click.echo(f"Copied {str(source)!r} to {str(destination)!r} "
                       f"in {format_duration(result.elapsed_seconds)}.")


@cli.command()
@click.pass_context
def validate_config(ctx):
    """Validate configuration file."""
    config_manager = _config_manager(ctx)

    click.echo("✅ Configuration loaded successfully")
    click.echo(f"\n📊 Configuration Summary:")
    click.echo(f"   File: {config_manager.config_file or 'none (built-in defaults)'}")

    rsync_config = config_manager.get_rsync_config()
    click.echo(f"   rsync binary: {rsync_config['binary']}")
    click.echo(f"   Backup options: {' '.join(rsync_config['backup_options'])}")
    click.echo(f"   Partial options: {' '.join(rsync_config['partial_options'])}")

    logging_config = config_manager.get_logging_config()
    click.echo(f"   Log level: {logging_config['level']}")
    click.echo(f"   Log file: {logging_config.get('file') or 'none'}")


def main():
    """Main CLI entry point."""
    cli()


if __name__ == '__main__':
    main()
