"""
setup-utoo — CLI entrypoint.

Two commands, one per phase of the job:

Usage:
    python -m src.main acquire          # main step
    python -m src.main save             # post-job step
    python -m src.main --help
"""

from __future__ import annotations

import logging
import os
import sys
import tempfile

import click

from src import __version__
from src.adapters.cache.local import LocalCacheBackend
from src.adapters.platform.github import GitHubActionsPlatform
from src.core.observability.logging_config import setup_logging

logger = logging.getLogger(__name__)

_cache_dir_option = click.option(
    "--cache-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Cache root (default: $SETUP_UTOO_CACHE_DIR or $RUNNER_TOOL_CACHE).",
)


@click.group()
@click.version_option(version=__version__, prog_name="setup-utoo")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Only show warnings and errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, debug: bool) -> None:
    """Install utoo with a tool cache and an npm store cache."""
    ctx.ensure_object(dict)
    platform = ctx.obj.get("platform") or GitHubActionsPlatform()
    ctx.obj["platform"] = platform

    os.environ.setdefault("RUNNER_TEMP", tempfile.gettempdir())

    # ── Logging setup (once, at process start) ──────────────────
    if debug or platform.debug_enabled:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "WARNING"
    else:
        level = os.environ.get("SETUP_UTOO_LOG_LEVEL", "INFO")

    setup_logging(
        level=level,
        log_file=os.environ.get("SETUP_UTOO_LOG_FILE"),
        log_file_level=os.environ.get("SETUP_UTOO_LOG_FILE_LEVEL"),
        annotations=platform.running_in_actions,
        quiet_third_party=not debug,
    )


@cli.command()
@click.option("--utoo-version", "version", default=None, help="Version to install.")
@click.option("--registry", default=None, help="npm registry URL.")
@click.option(
    "--cache-utoo/--no-cache-utoo", default=None, help="Cache the installed binary.",
)
@click.option(
    "--cache-store/--no-cache-store", default=None, help="Cache the npm store.",
)
@_cache_dir_option
@click.pass_context
def acquire(
    ctx: click.Context,
    version: str | None,
    registry: str | None,
    cache_utoo: bool | None,
    cache_store: bool | None,
    cache_dir: str | None,
) -> None:
    """Restore caches, install utoo if needed, and publish outputs."""
    from src.core.config.loader import load_request
    from src.core.services.tool_install.orchestration.orchestrator import acquire_tool

    platform = ctx.obj["platform"]

    try:
        request = load_request(
            platform,
            overrides={
                "utoo-version": version,
                "registry": registry,
                "cache-utoo": cache_utoo,
                "cache-store": cache_store,
            },
        )
        backend = LocalCacheBackend.from_environment(cache_dir)
        result = acquire_tool(request, backend=backend, platform=platform)
    except Exception as e:
        logger.debug("Acquisition failed", exc_info=True)
        logger.error("%s", e)
        sys.exit(1)

    for name, value in result.to_outputs().items():
        platform.set_output(name, value)

    source = "cache" if result.cache_hit else "registry"
    logger.info("utoo %s ready at %s (from %s)", result.version, result.path, source)


@cli.command()
@_cache_dir_option
@click.pass_context
def save(ctx: click.Context, cache_dir: str | None) -> None:
    """Save caches recorded by the acquire step. Never fails the job."""
    from src.core.services.tool_install.orchestration.orchestrator import run_save_phase

    platform = ctx.obj["platform"]
    backend = LocalCacheBackend.from_environment(cache_dir)
    run_save_phase(platform, backend)


if __name__ == "__main__":
    cli()
