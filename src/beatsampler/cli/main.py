"""Main CLI entry point."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import click

from beatsampler import __version__

from .commands import audio_group, midi_group

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool, log_file: Optional[Path] = None) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: If True, log at DEBUG level instead of INFO
        log_file: Optional rotating log file in addition to the console
    """
    level = logging.DEBUG if verbose else logging.INFO

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        # Keeps last 5 files, max 10MB each
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    logger.debug(f"Logging configured: level={logging.getLevelName(level)}, file={log_file}")


@click.group(invoke_without_command=True)
@click.pass_context
@click.version_option(version=__version__, prog_name="beatsampler")
@click.option(
    '--shared-stream/--dedicated-streams',
    default=None,
    help='Play every sample through one shared output stream (default: auto, on for Linux)'
)
@click.option(
    '--config',
    '-c',
    'config_path',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Config file (default: ~/.beatsampler/config.json)'
)
@click.option(
    '--sounds-dir',
    '-d',
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help='Directory holding the sample files'
)
@click.option(
    '--seed',
    type=int,
    default=None,
    help='Random seed for samples played by unmapped pads'
)
@click.option(
    '-v', '--verbose',
    is_flag=True,
    help='Enable verbose diagnostic logging'
)
@click.option(
    '--log-file',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Also log to this file'
)
def cli(
    ctx,
    shared_stream: Optional[bool],
    config_path: Optional[Path],
    sounds_dir: Optional[Path],
    seed: Optional[int],
    verbose: bool,
    log_file: Optional[Path],
):
    """
    Play WAV samples from a MIDI pad controller.

    Pads mapped in the config trigger their samples; any other pad plays a
    random pick from the ambient set. Pressing the transport stop button
    (MMC stop) shuts the sampler down.

    \b
    Examples:
      # Run with the default config
      beatsampler

      # Force one shared stream (newest pad hit cuts off the previous one)
      beatsampler --shared-stream

      # Use another sample directory and a reproducible ambient sequence
      beatsampler --sounds-dir ./sounds --seed 42

      # List audio devices / MIDI ports
      beatsampler audio list
      beatsampler midi list
    """
    if ctx.invoked_subcommand is not None:
        return

    from beatsampler.core import SamplerApplication
    from beatsampler.exceptions import BeatSamplerError, format_error_for_display
    from beatsampler.models import AppConfig

    try:
        config = AppConfig.load_or_default(config_path)
    except BeatSamplerError as e:
        setup_logging(verbose, log_file)
        _report_error(e, format_error_for_display)
        sys.exit(1)

    overrides = {}
    if sounds_dir is not None:
        overrides['sounds_dir'] = sounds_dir
    if seed is not None:
        overrides['random_seed'] = seed
    if shared_stream is not None:
        overrides['shared_stream'] = shared_stream
    if verbose:
        overrides['verbose'] = True
    if overrides:
        config = config.model_copy(update=overrides)

    setup_logging(config.verbose, log_file)
    logger.info("Starting beatsampler")

    app = SamplerApplication(config)
    try:
        app.setup()
        exit_code = app.run()
    except BeatSamplerError as e:
        logger.error(f"Setup failed: {e.technical_message}")
        _report_error(e, format_error_for_display)
        exit_code = 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user during setup")
        exit_code = 0
    finally:
        app.close()

    sys.exit(exit_code)


def _report_error(error: Exception, formatter) -> None:
    """Show a clean error message without traceback."""
    user_message, recovery_hint = formatter(error)
    click.echo(f"ERROR: {user_message}", err=True)
    if recovery_hint:
        click.echo(f"\n{recovery_hint}", err=True)


# Register utility commands
cli.add_command(audio_group)
cli.add_command(midi_group)

if __name__ == "__main__":
    cli()
