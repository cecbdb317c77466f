"""Configuration management for module loading."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import yaml

from .core.loop_loader import LoopMachineIteration
from .core.module_loader import DirectIteration, LoaderHooks, ModuleLoader

logger = logging.getLogger(__name__)

STRATEGIES = ("direct", "loop_machine")

DEFAULT_CONFIG: Dict[str, Any] = {
    "loader": {"strategy": "direct", "report_failures": True},
    "modules": {},
}


class ModuleConfigError(ValueError):
    """Raised when the module configuration is invalid."""


def _defaults() -> Dict[str, Any]:
    return {key: dict(value) for key, value in DEFAULT_CONFIG.items()}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load loader configuration from a YAML file.

    Args:
        config_path: Path to the YAML file (default: modules_config.yaml)

    Returns:
        Configuration dict; defaults if the file is missing or empty
    """
    path = Path(config_path or "modules_config.yaml")
    if not path.exists():
        logger.warning(f"Module config not found: {path}, using defaults")
        return _defaults()

    with open(path, "r") as f:
        config = yaml.safe_load(f)

    if config is None:
        logger.info(f"Module config {path} is empty, using defaults")
        return _defaults()

    if not isinstance(config, dict):
        raise ModuleConfigError(f"{path}: expected a mapping at top level")

    logger.info(f"Loaded module configuration from {path}")
    return config


def prefix_filter(*prefixes: str) -> Callable[[Any], bool]:
    """Predicate accepting modules whose identifier starts with one of the prefixes (case-insensitive)."""
    lowered = tuple(p.lower() for p in prefixes)

    def predicate(module: Any) -> bool:
        return module.identifier().lower().startswith(lowered)

    return predicate


@dataclass
class LoaderSettings:
    """Validated loader configuration."""
    strategy: str = "direct"
    report_failures: bool = True
    disabled: List[str] = field(default_factory=list)
    include_prefixes: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoaderSettings":
        loader = data.get("loader") or {}
        modules = data.get("modules") or {}
        for name, section in (("loader", loader), ("modules", modules)):
            if not isinstance(section, dict):
                raise ModuleConfigError(
                    f"'{name}' section must be a mapping, got {type(section).__name__}"
                )

        strategy = loader.get("strategy", "direct")
        if strategy not in STRATEGIES:
            raise ModuleConfigError(
                f"Unknown loader strategy {strategy!r}, expected one of {STRATEGIES}"
            )

        report_failures = loader.get("report_failures", True)
        if not isinstance(report_failures, bool):
            raise ModuleConfigError(
                f"'report_failures' must be true or false, got {report_failures!r}"
            )

        prefixes = modules.get("include_prefixes") or []
        if isinstance(prefixes, str):
            prefixes = [prefixes]
        if not isinstance(prefixes, list) or not all(isinstance(p, str) for p in prefixes):
            raise ModuleConfigError(f"'include_prefixes' must be a list of strings, got {prefixes!r}")

        # Every other key under "modules" is a per-module section
        disabled = [
            name for name, section in modules.items()
            if name != "include_prefixes"
            and isinstance(section, dict)
            and not section.get("enabled", True)
        ]

        return cls(
            strategy=strategy,
            report_failures=report_failures,
            disabled=disabled,
            include_prefixes=prefixes,
        )

    @classmethod
    def from_file(cls, config_path: Optional[str] = None) -> "LoaderSettings":
        return cls.from_dict(load_config(config_path))

    def is_enabled(self, module: Any) -> bool:
        """Whether configuration allows the module to load."""
        module_id = module.identifier()
        if module_id in self.disabled:
            return False
        if self.include_prefixes and not prefix_filter(*self.include_prefixes)(module):
            return False
        return True


def build_loader(settings: LoaderSettings, hooks: Optional[LoaderHooks] = None) -> ModuleLoader:
    """
    Create a module loader from settings.

    Args:
        settings: Loader settings
        hooks: Caller hooks; their eligibility predicate is combined with the configuration's

    Returns:
        Configured ModuleLoader
    """
    hooks = hooks or LoaderHooks()
    can_load = hooks.can_load_module

    combined = LoaderHooks(
        prepare_module_list=hooks.prepare_module_list,
        can_load_module=lambda module: settings.is_enabled(module) and can_load(module),
        handle_unloaded_module=hooks.handle_unloaded_module,
    )

    if settings.strategy == "loop_machine":
        iteration = LoopMachineIteration()
    else:
        iteration = DirectIteration()

    logger.info(f"Created module loader (strategy={settings.strategy})")
    return ModuleLoader(combined, iteration, report_failures=settings.report_failures)
