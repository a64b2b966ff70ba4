"""Property Script module.

Command-line entry point: loads a YAML run configuration, imports the
configured modules, checks every Property they define and prints a report.

Usage::

    python -m propcheck [config.yaml] [--seed SEED] [--module NAME ...]
"""

import argparse
import asyncio
import dataclasses
import importlib
import logging
import signal
import sys
from typing import Optional

from propcheck.config_manager import ConfigManager
from propcheck.errors import ConstructionError
from propcheck.models import AppConfig, PropertyOutcome
from propcheck.reporter import Reporter
from propcheck.runner import Property


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def discover_properties(module_name: str) -> list[Property]:
    """Import a module and collect the Property objects it defines.

    Args:
        module_name: Dotted module name, importable from the current path.

    Returns:
        The module's Property objects, in definition order.

    Raises:
        RuntimeError: If the module cannot be imported.
    """
    try:
        module = importlib.import_module(module_name)
    except Exception as e:
        logger.error(f"Failed to import {module_name}: {e}")
        raise RuntimeError(
            f"Failed to import property module {module_name}: {e}\n"
            "Check that the module is on sys.path and imports cleanly."
        ) from e
    return [value for value in vars(module).values() if isinstance(value, Property)]


class PropertyScript:
    """Orchestrates a command-line property run.

    Attributes:
        config_manager: ConfigManager instance for loading configuration.
        config: The loaded AppConfig, or None if not yet loaded.
        running: Cleared by SIGINT/SIGTERM; the script stops between properties.
        outcomes: Outcomes collected so far.
    """

    def __init__(
        self,
        config_path: str = "propcheck.yaml",
        seed: Optional[str] = None,
        modules: Optional[list[str]] = None,
        reporter: Optional[Reporter] = None,
    ):
        """Initialize the PropertyScript.

        Args:
            config_path: Path to the YAML configuration file.
            seed: Seed overriding the configured one for every property.
            modules: Module names checked in addition to the configured ones.
            reporter: Reporter used for output; defaults to a printing Reporter.
        """
        self.config_path = config_path
        self.seed = seed
        self.extra_modules = modules or []
        self.config_manager = ConfigManager()
        self.config: Optional[AppConfig] = None
        self.reporter = reporter or Reporter()
        self.running = False
        self.outcomes: list[PropertyOutcome] = []
        self._previous_handlers: dict = {}

    async def start(self) -> int:
        """Run every discovered property.

        Returns:
            Process exit code: 0 when every property passed, 1 when any was
            falsified or inconclusive, or when configuration or import failed.
        """
        logger.info(f"Loading configuration from {self.config_path}")
        self.config, errors = self.config_manager.load(self.config_path)
        if errors:
            for error in errors:
                logger.error(f"Config error: {error}")
            self.reporter.write("Configuration could not be loaded; fix the file and retry.")
            return 1

        properties: list[Property] = []
        try:
            for module_name in self.config.modules + self.extra_modules:
                found = discover_properties(module_name)
                logger.info(f"Found {len(found)} properties in {module_name}")
                properties.extend(found)
        except RuntimeError as e:
            self.reporter.write(str(e))
            return 1

        if not properties:
            logger.warning("No properties found. Nothing to check.")
            return 0

        self._register_signal_handlers()
        self.running = True
        try:
            for prop in properties:
                if not self.running:
                    logger.warning("Interrupted, skipping remaining properties")
                    break
                run_config = prop.config or self.config.run
                if self.seed is not None:
                    run_config = dataclasses.replace(run_config, seed=self.seed)
                try:
                    outcome = await prop.check_async(run_config)
                except ConstructionError as e:
                    logger.error(f"{prop.name}: invalid property setup: {e}")
                    self.reporter.write(f"{prop.name}: invalid property setup: {e}")
                    return 1
                self.reporter.report(outcome)
                self.outcomes.append(outcome)
        finally:
            self.shutdown()

        self.reporter.write(self.reporter.summarize(self.outcomes))
        interrupted = len(self.outcomes) < len(properties)
        return 0 if all(o.ok for o in self.outcomes) and not interrupted else 1

    def _register_signal_handlers(self) -> None:
        """Register SIGINT/SIGTERM handlers that stop the run between properties."""
        def signal_handler(sig, frame):
            logger.info("Received interrupt signal, stopping after the current property")
            self.running = False

        for sig in (signal.SIGINT, getattr(signal, "SIGTERM", None)):
            if sig is None:
                continue
            try:
                self._previous_handlers[sig] = signal.signal(sig, signal_handler)
            except ValueError:
                # Not on the main thread; run without interrupt handling.
                logger.debug("Signal handlers can only be installed from the main thread")

    def shutdown(self) -> None:
        """Stop the run and restore the previous signal handlers."""
        self.running = False
        for sig, handler in self._previous_handlers.items():
            signal.signal(sig, handler)
        self._previous_handlers.clear()


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="propcheck", description="Check property-based tests.")
    parser.add_argument("config", nargs="?", default="propcheck.yaml", help="YAML run configuration")
    parser.add_argument("--seed", help="seed overriding the configured one")
    parser.add_argument(
        "--module", action="append", default=[], help="additional module to check (repeatable)"
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the property script."""
    args = parse_args(argv)
    script = PropertyScript(config_path=args.config, seed=args.seed, modules=args.module)
    return asyncio.run(script.start())


if __name__ == "__main__":
    sys.exit(main())
