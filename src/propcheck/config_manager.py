"""Config Manager module.

Responsible for loading, validating, and saving YAML run configuration files.
"""

import os
from typing import Optional

import yaml

from propcheck.models import AppConfig, RunConfig

RUN_KEYS = (
    "trial_count",
    "max_size",
    "size_growth",
    "seed",
    "shrink_step_ceiling",
    "filter_retry_ceiling",
    "deadline_seconds",
    "shrink_concurrency",
)


class ConfigManager:
    """Manages loading, validating, saving, and generating YAML configuration files.

    The load() method returns a tuple of (AppConfig or None, list[str] errors).
    When the file doesn't exist, generate_default() is called first, then the
    generated file is loaded. When the YAML is malformed or fields are invalid,
    errors are returned.
    """

    def load(self, path: str) -> tuple[Optional[AppConfig], list[str]]:
        """Load configuration from a YAML file and convert to AppConfig.

        Args:
            path: Path to the YAML configuration file.

        Returns:
            A tuple of (AppConfig or None, list of error messages).
            If loading and validation succeed, returns (AppConfig, []).
            If there are errors, returns (None, [error messages]).
        """
        if not os.path.exists(path):
            self.generate_default(path)

        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            return None, [f"YAML syntax error: {e}"]
        except OSError as e:
            return None, [f"cannot read config file: {e}"]

        if raw is None:
            return None, ["config file is empty"]

        if not isinstance(raw, dict):
            return None, ["config file must contain a mapping at the top level"]

        config, parse_errors = self._parse_config(raw)
        if parse_errors:
            return None, parse_errors

        validation_errors = self.validate(config)
        if validation_errors:
            return None, validation_errors

        return config, []

    def validate(self, config: AppConfig) -> list[str]:
        """Validate an AppConfig instance.

        Checks the run options (see RunConfig.validate) and that ``modules``
        is a list of non-empty strings.

        Args:
            config: The AppConfig to validate.

        Returns:
            A list of error messages. An empty list means validation passed.
        """
        errors = list(config.run.validate())

        if not isinstance(config.modules, list):
            errors.append("modules must be a list")
        else:
            for i, module in enumerate(config.modules):
                if not isinstance(module, str) or not module.strip():
                    errors.append(f"modules[{i}] must be a non-empty string")

        return errors

    def generate_default(self, path: str) -> None:
        """Generate a default configuration file with comments.

        Args:
            path: Path where the default config file will be written.
        """
        default_content = """\
# propcheck run configuration

# Number of trials a property must pass
trial_count: 100

# Largest size hint handed to generators; size grows by size_growth per trial
max_size: 100
size_growth: 1.0

# Fixed seed for reproducible runs; leave empty to derive one from the clock.
# Every report prints the seed it used.
seed:

# Maximum number of shrink candidates evaluated per falsified property
shrink_step_ceiling: 1000

# Maximum number of discarded trials before a run is reported inconclusive
filter_retry_ceiling: 500

# Optional wall-clock budget per property, in seconds
deadline_seconds:

# Shrink candidates checked together for async predicates
shrink_concurrency: 1

# Modules whose Property objects are checked
modules: []
"""
        parent_dir = os.path.dirname(path)
        if parent_dir:
            os.makedirs(parent_dir, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            f.write(default_content)

    def save(self, config: AppConfig, path: str) -> None:
        """Save an AppConfig to a YAML file.

        Args:
            config: The AppConfig to save.
            path: Path where the config file will be written.
        """
        data = self._config_to_dict(config)

        parent_dir = os.path.dirname(path)
        if parent_dir:
            os.makedirs(parent_dir, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

    def _parse_config(self, raw: dict) -> tuple[Optional[AppConfig], list[str]]:
        """Parse a raw dictionary into an AppConfig.

        Missing keys fall back to RunConfig defaults; unknown keys are errors.

        Args:
            raw: Dictionary loaded from YAML.

        Returns:
            A tuple of (AppConfig or None, list of parse error messages).
        """
        errors: list[str] = []

        unknown = sorted(str(key) for key in raw if key not in RUN_KEYS and key != "modules")
        for key in unknown:
            errors.append(f"unknown config key: {key}")

        defaults = RunConfig()
        values = {key: raw.get(key, getattr(defaults, key)) for key in RUN_KEYS}
        # Empty YAML values mean "use the default" for the numeric options.
        for key in RUN_KEYS:
            if values[key] is None and getattr(defaults, key) is not None:
                values[key] = getattr(defaults, key)

        modules = raw.get("modules", [])
        if modules is None:
            modules = []
        elif not isinstance(modules, list):
            errors.append("modules must be a list")
            return None, errors

        if errors:
            return None, errors

        return AppConfig(run=RunConfig(**values), modules=modules), []

    @staticmethod
    def _config_to_dict(config: AppConfig) -> dict:
        """Convert an AppConfig to a plain dictionary suitable for YAML serialization.

        Args:
            config: The AppConfig to convert.

        Returns:
            A dictionary representation of the config.
        """
        data = {key: getattr(config.run, key) for key in RUN_KEYS}
        data["modules"] = list(config.modules)
        return data
