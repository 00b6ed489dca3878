"""
Entry point for the trainer presence core.

The package is an in-process library; the only runnable surface is the
offline console demo.

Usage:
    python main.py demo
    python main.py demo sync-failure
"""

import asyncio
import logging
import sys

from trainer_core.config import settings

logger = logging.getLogger(__name__)


def _run_demo(scenario: str) -> None:
    from console_demo import SCENARIOS, ConsoleSession

    if scenario not in SCENARIOS:
        raise SystemExit(f"Unknown scenario {scenario!r}. Choose from: {', '.join(SCENARIOS)}")
    logger.info("Starting %s demo: %s", settings.app_name, scenario)
    asyncio.run(ConsoleSession(scenario).run())


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "demo":
        _run_demo(sys.argv[2] if len(sys.argv) > 2 else "happy-path")
    else:
        print(__doc__)
