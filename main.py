# ============================================================================
# NEVER - MAIN APPLICATION
# ============================================================================
# STATUS: Entry point - Readiness gate CLI
# PURPOSE: Parse flags, build checkers, wait for every target
# CREATED: 19 OCT 2026
# ============================================================================
"""
never - wait until network targets are reachable

Blocks until every configured TCP, HTTP and ICMP target is ready, then
exits 0. Exits 1 with a single error line on stderr when a target gives
up (max attempts) or the configuration is invalid. SIGINT / SIGTERM stop
waiting cooperatively.

Usage:
    python main.py --tcp.db.address=db:5432 --http.api.address=http://api/healthz
    never --config checks.yaml --max-attempts 30
"""

import asyncio
import signal
import sys
from typing import Optional, Sequence

from __version__ import __version__
from core.config.defaults import get_defaults
from core.config.flags import FlagError, parse_flags
from core.context import ReadinessContext
from core.logging import ComponentType, configure_logging, get_logger
from checkers import ConfigurationError
from orchestrator import run_all
from services import build_checkers, load_config_file

logger = get_logger(__name__, ComponentType.CLI)


async def run(argv: Sequence[str], ctx: Optional[ReadinessContext] = None) -> None:
    """
    Run the readiness gate.

    Args:
        argv: Command-line arguments without the program name
        ctx: Root context (a new one wired to SIGINT/SIGTERM if None)

    Raises:
        FlagError / ConfigurationError: Invalid configuration
        CheckerFailedError: A target gave up or the deadline passed
    """
    flags = parse_flags(argv)
    configure_logging(
        level=flags.log_level,
        json_output=flags.log_format == "json",
        version=__version__,
    )
    logger.debug(f"Starting never v{__version__}")
    loop = asyncio.get_running_loop()

    try:
        defaults = get_defaults()
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    default_interval = defaults.default_interval
    max_attempts = defaults.max_attempts
    descriptors = []

    if flags.config_path:
        config_file = load_config_file(flags.config_path)
        descriptors.extend(config_file.checks)
        if config_file.default_interval is not None:
            default_interval = config_file.default_interval
        if config_file.max_attempts is not None:
            max_attempts = config_file.max_attempts

    descriptors.extend(flags.descriptors)
    if flags.default_interval is not None:
        default_interval = flags.default_interval
    if flags.max_attempts is not None:
        max_attempts = flags.max_attempts

    if not descriptors:
        raise ConfigurationError("no checkers configured")

    # ICMP targets resolve their host with a blocking getaddrinfo
    checkers = await loop.run_in_executor(
        None, build_checkers, descriptors, default_interval, defaults
    )

    owns_ctx = ctx is None
    root = ctx or ReadinessContext()
    installed = []
    if owns_ctx:
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, _on_signal, root, sig)
                installed.append(sig)
            except (NotImplementedError, RuntimeError):
                # Platforms without loop signal support fall back to KeyboardInterrupt
                pass

    try:
        await run_all(root, checkers, max_attempts=max_attempts)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
        if owns_ctx:
            root.close()

    if root.done:
        logger.info("Stopped waiting: interrupted")
    else:
        logger.info(f"All {len(checkers)} targets are ready")


def _on_signal(ctx: ReadinessContext, sig: signal.Signals) -> None:
    logger.info(f"Received {sig.name}, stopping")
    ctx.cancel()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Process entry point. Returns the exit code."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        asyncio.run(run(argv))
    except (FlagError, ConfigurationError) as e:
        print(f"configuration error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        print(str(e), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
