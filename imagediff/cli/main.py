"""The ``imagediff`` command.

Usage:
    imagediff [OPTIONS] IMAGE_X IMAGE_Y

Prints one line per commit between the sources of IMAGE_X (older) and
IMAGE_Y (newer), most recent first::

    3f2c1ab Fix retry loop in uploader
    9e01d44 Bump base image
"""

from __future__ import annotations

import dataclasses

import click
import structlog

from imagediff import __version__
from imagediff.config import load_config
from imagediff.diff import diff
from imagediff.errors import ImageDiffError
from imagediff.observability.logging import get_logger, setup_logging


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("x", metavar="IMAGE_X")
@click.argument("y", metavar="IMAGE_Y")
@click.option(
    "--docker-config-path",
    default=None,
    help="Path to your Docker config.json file. This file contains your credentials "
    "to authenticate against private Docker registries.  [default: ~/.docker/config.json]",
)
@click.option(
    "--ssh-private-key-path",
    default=None,
    help="Path to the private SSH key to use to authenticate against private Git "
    "repositories.  [default: ~/.ssh/id_rsa]",
)
@click.option(
    "--ssh-only",
    is_flag=True,
    help="Clone over SSH straight away instead of trying anonymous HTTPS first.",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Verbosity of the log written to stderr.",
)
@click.version_option(__version__, prog_name="imagediff")
def cli(
    x: str,
    y: str,
    docker_config_path: str | None,
    ssh_private_key_path: str | None,
    ssh_only: bool,
    log_level: str | None,
) -> None:
    """Compare two Docker images and list the Git commits between them."""
    try:
        config = load_config()
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc

    setup_logging(log_level or config.log.level, config.log.format)
    log = get_logger("cli")

    git_options = config.options.git
    if ssh_private_key_path is not None:
        git_options = dataclasses.replace(git_options, ssh_private_key_path=ssh_private_key_path)
    if ssh_only:
        git_options = dataclasses.replace(git_options, ssh_only=ssh_only)
    options = dataclasses.replace(
        config.options,
        docker_config_path=docker_config_path or config.options.docker_config_path,
        git=git_options,
    )

    structlog.contextvars.bind_contextvars(x=x, y=y)
    try:
        changes = diff(x, y, options, docker_config=config.docker)
    except ImageDiffError as exc:
        log.error("imagediff failed", error=str(exc), kind=type(exc).__name__)
        raise SystemExit(1) from exc
    finally:
        structlog.contextvars.unbind_contextvars("x", "y")

    for change in changes:
        click.echo(str(change))
