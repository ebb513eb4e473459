"""CLI interface for s3syncd."""

import logging
import signal
from typing import Any, Optional

import click
from botocore.exceptions import BotoCoreError

from . import __version__
from .api import S3Client
from .cli_progress import SyncProgressDisplay
from .config import SyncConfig, load_config
from .exceptions import ConfigError, ScanError
from .output import OutputFormatter
from .sync import SyncEngine, SyncScheduler
from .utils import format_duration

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool, quiet: bool) -> None:
    """Configure logging for the CLI process.

    Per-file events are logged at INFO, so INFO is the default level.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("s3syncd").setLevel(level)

    # boto3 is chatty at DEBUG; keep it quiet unless explicitly verbose
    for name in ("boto3", "botocore", "s3transfer", "urllib3"):
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)


def create_store(config: SyncConfig) -> S3Client:
    """Create the S3 client described by a configuration."""
    return S3Client(
        access_key=config.access_key,
        secret_key=config.secret_key,
        region=config.region,
        endpoint_url=config.endpoint_url,
        operation_timeout=config.operation_timeout,
        max_retries=config.max_retries,
    )


def _install_stop_handlers(scheduler: SyncScheduler) -> dict:
    """Route SIGINT/SIGTERM to a cooperative scheduler stop.

    Returns:
        Previous handlers, to be restored afterwards
    """

    def handler(signum: int, frame: Any) -> None:
        logger.info(f"Received {signal.Signals(signum).name}")
        scheduler.stop()

    previous = {}
    for sig in (signal.SIGINT, signal.SIGTERM):
        previous[sig] = signal.getsignal(sig)
        signal.signal(sig, handler)
    return previous


def _restore_handlers(previous: dict) -> None:
    for sig, handler in previous.items():
        signal.signal(sig, handler)


@click.command()
@click.argument("config_path", metavar="CONFIG", type=click.Path(dir_okay=False))
@click.option(
    "--once",
    is_flag=True,
    help="Run a single pass even if sync_interval is configured",
)
@click.option(
    "--progress",
    is_flag=True,
    help="Show a progress bar for one-shot runs (lowers log level to WARNING)",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(version=__version__, prog_name="s3syncd")
@click.pass_context
def main(
    ctx: Any,
    config_path: str,
    once: bool,
    progress: bool,
    quiet: bool,
    json_output: bool,
    verbose: bool,
) -> None:
    """s3syncd - mirror a local directory into S3 with verified sync markers.

    CONFIG: Path to a key=value configuration file
    """
    out = OutputFormatter(json_output=json_output, quiet=quiet)
    show_progress = progress and not (quiet or json_output or verbose)
    _configure_logging(verbose, quiet or show_progress)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        out.error(f"Error reading config: {e}")
        ctx.exit(1)

    try:
        store = create_store(config)
    except (BotoCoreError, ValueError) as e:
        out.error(f"Unable to create S3 client: {e}")
        ctx.exit(1)

    target = config.target
    interval = 0.0 if once else config.interval
    if interval > 0:
        show_progress = False

    if not out.quiet:
        out.info(f"Syncing: {target}")
        out.info(f"Marker policy: {target.marker_policy.value}")
        if target.reconcile:
            out.warning(
                "Reconciliation enabled: remote objects without a local file "
                "will be deleted"
            )
        if interval > 0:
            out.info(f"Interval: {format_duration(interval)}")
        out.print("")

    engine = SyncEngine(store, output=out)
    stats = _run(ctx, out, engine, target, interval, show_progress)

    if json_output:
        out.output_json(stats if stats is not None else {"error": "sync failed"})

    # periodic runs exit 0 after a clean stop
    if stats is None and interval <= 0:
        ctx.exit(1)


def _run(
    ctx: Any,
    out: OutputFormatter,
    engine: SyncEngine,
    target: Any,
    interval: float,
    show_progress: bool,
) -> Optional[dict]:
    display: Optional[SyncProgressDisplay] = None
    scheduler = SyncScheduler(engine, target, interval=interval)
    previous = _install_stop_handlers(scheduler) if interval > 0 else {}

    try:
        if show_progress:
            display = SyncProgressDisplay()
            with display:
                scheduler.progress_tracker = display.create_tracker()
                return scheduler.run()
        return scheduler.run()
    except ScanError as e:
        out.error(f"Initial sync failed: {e}")
        ctx.exit(1)
    except KeyboardInterrupt:
        out.warning("\nSync cancelled by user")
        ctx.exit(130)  # Standard exit code for SIGINT
    finally:
        _restore_handlers(previous)
    return None


if __name__ == "__main__":
    main()
