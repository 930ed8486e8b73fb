"""Command line entry point for brt."""

from pathlib import Path

import click

from brt.config import Config
from brt.errors import StartupError


@click.command()
@click.version_option(package_name="brt")
@click.option(
    "--interval",
    "-i",
    type=float,
    default=None,
    help="Seconds between process table samples.",
)
@click.option(
    "--frame-rate",
    "-f",
    type=float,
    default=None,
    help="Frame rate, i.e. number of frames per second.",
)
@click.option("--debug", "-x", is_flag=True, help="Show ticks and frames per second.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default ~/.config/brt/config.toml).",
)
def main(
    interval: float | None,
    frame_rate: float | None,
    debug: bool,
    config_path: Path | None,
) -> None:
    """Browse the local process table, live."""
    from brt import logging as brt_logging
    from brt.app import BrtApp
    from brt.enumerator import PsutilEnumerator, probe

    try:
        config = Config.load(config_path)
        if interval is not None:
            config.sampler.interval = interval
        if frame_rate is not None:
            config.ui.frame_rate = frame_rate
        if debug:
            config.ui.debug = True
        config.validate()
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    brt_logging.configure(config)
    log = brt_logging.get_logger(__name__)

    enumerator = PsutilEnumerator()
    try:
        count = probe(enumerator)
    except StartupError as e:
        log.error("startup_failed", error=str(e))
        raise click.ClickException(f"Can't read the process table: {e}") from e
    log.info("startup", processes=count, interval=config.sampler.interval)

    BrtApp(config, enumerator).run()


if __name__ == "__main__":
    main()
