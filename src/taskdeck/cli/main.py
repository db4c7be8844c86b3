# src/taskdeck/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, loads tasks, then runs the console REPL.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state, load_initial_tasks
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        store = getattr(state, "task_store", None)
        if store is not None and hasattr(store, "close"):
            store.close()
    except Exception:
        logger.debug("Task store close failed.", exc_info=True)


async def _run(state: AppState) -> None:
    await load_initial_tasks(state)
    if state.tasks.error:
        print(f"{state.tasks.error}. Use /reload to try again.")

    if getattr(state.settings, "console_enabled", True):
        await run_console_loop(state)
    else:
        logger.info("Console disabled; loaded %d tasks and exiting.", len(state.tasks.list()))


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    file_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/taskdeck")
    setup_logging(log_dir=log_dir, file_level=file_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "taskdeck"))

    state = create_initial_state(settings=settings)

    try:
        asyncio.run(_run(state))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    finally:
        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
