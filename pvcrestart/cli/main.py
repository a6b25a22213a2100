"""Click command for pvc-restart."""

from __future__ import annotations

import asyncio

import click

from pvcrestart import __version__
from pvcrestart.app import main
from pvcrestart.config import load_config
from pvcrestart.errors import ConfigurationError, PVCRestartError
from pvcrestart.models.config import DEFAULT_ANNOTATION
from pvcrestart.observability.logging import get_logger, setup_logging

_EXIT_FATAL = 1
_EXIT_INTERRUPTED = 130


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "-a",
    "--annotation",
    metavar="KEY",
    help=f"Pods with a non-empty value for this annotation are skipped. [default: {DEFAULT_ANNOTATION}]",
)
@click.option(
    "-A",
    "--all",
    "all_annotations",
    is_flag=True,
    help="Ignore the opt-out annotation and consider every pod.",
)
@click.option("-n", "--name-regex", metavar="REGEX", help="Match volumes whose name matches REGEX.")
@click.option(
    "-t",
    "--type",
    "types",
    multiple=True,
    metavar="TYPE[,TYPE...]",
    help="Match volumes backed by any of these storage types (e.g. nfs, glusterfs, csi). Repeatable.",
)
@click.option("-d", "--delete", is_flag=True, help="Delete matched pods. Without it only matches are logged.")
@click.option("--keep-going", is_flag=True, help="Continue past delete failures and fail at the end.")
@click.option("--kubeconfig", type=click.Path(dir_okay=False), help="Path to a kubeconfig file.")
@click.option("--context", help="Kubeconfig context to use.")
@click.option("--log-level", help="debug, info, warning or error. [env: PVCRESTART_LOG_LEVEL]")
@click.option("--log-format", help="json or console. [env: PVCRESTART_LOG_FORMAT]")
@click.version_option(__version__, prog_name="pvc-restart")
def cli(
    annotation: str | None,
    all_annotations: bool,
    name_regex: str | None,
    types: tuple[str, ...],
    delete: bool,
    keep_going: bool,
    kubeconfig: str | None,
    context: str | None,
    log_level: str | None,
    log_format: str | None,
) -> None:
    """Find pods whose PersistentVolumes match the given filters and optionally restart them.

    At least one of --name-regex and --type is required. Pods are only
    deleted when --delete is passed.
    """
    try:
        config = load_config(
            annotation=annotation,
            all_annotations=all_annotations,
            name_regex=name_regex,
            types=types,
            delete=delete,
            keep_going=keep_going,
            kubeconfig=kubeconfig,
            context=context,
            log_level=log_level,
            log_format=log_format,
        )
    except ConfigurationError as exc:
        raise click.UsageError(str(exc)) from exc

    setup_logging(config.log.level, config.log.format)
    log = get_logger("cli")

    try:
        asyncio.run(main(config))
    except KeyboardInterrupt:
        log.warning("interrupted")
        raise SystemExit(_EXIT_INTERRUPTED) from None
    except PVCRestartError as exc:
        log.critical("fatal_error", error=str(exc), error_type=type(exc).__name__)
        raise SystemExit(_EXIT_FATAL) from exc
