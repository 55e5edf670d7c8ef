"""Gate test runs on shell-verified dependencies."""

from .dependency import ConfigurationError, Dependency, DependencySpec
from .hooks import Registrar, RunHooks
from .report import OutputSettings, colorize_output, output_settings, set_colorize_output
from .watcher import ChangeDetector, FileWatcher

__all__ = [
    "ChangeDetector",
    "ConfigurationError",
    "Dependency",
    "DependencySpec",
    "FileWatcher",
    "OutputSettings",
    "Registrar",
    "RunHooks",
    "colorize_output",
    "output_settings",
    "set_colorize_output",
]
