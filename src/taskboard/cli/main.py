# src/taskboard/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, loads the board, then runs the
console board (optional) until the user exits.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state, seed_demo_tasks
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        await state.gateway.aclose()
    except Exception:
        logger.debug("Gateway close failed.", exc_info=True)


async def run(settings) -> None:
    state = create_initial_state(settings=settings)
    try:
        if settings.seed_demo:
            await seed_demo_tasks(state)

        failure = await state.board.refresh()
        if failure is not None:
            logger.warning("Initial load failed: %s", failure.message)

        if settings.console_enabled:
            await run_console_loop(state)
        else:
            logger.info("Console disabled; loaded %d tasks. Nothing else to do.", len(state.board.store))
    finally:
        await _shutdown(state)


def main() -> None:
    settings = get_settings()

    # choose console log level from settings.log_level
    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    # choose log dir (prefer settings.data_dir if it exists)
    log_dir = getattr(settings, "data_dir", ".local/taskboard")
    log_file = setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s (gateway=%s)...", settings.app_name, settings.gateway)
    logger.debug("Writing logs to %s", log_file)

    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
