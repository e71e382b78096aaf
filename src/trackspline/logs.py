"""
Logging setup for trackspline applications.

Library modules only create loggers; applications call :func:`initialize`
once before exporting. Verbosity is controlled per category with rule
strings of the form ``"trackspline.export.debug=true"``.
"""

from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, List, Optional
import logging
import os
import sys

CATEGORIES = (
    "trackspline.app",
    "trackspline.core",
    "trackspline.export",
    "trackspline.cli",
)

LEVELS = ("debug", "info", "warning", "critical")

LEVEL_VALUES = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "critical": logging.CRITICAL,
}

# Above CRITICAL: nothing passes
LEVEL_OFF = logging.CRITICAL + 10

RULES_ENV_VAR = "TRACKSPLINE_LOG_RULES"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_FILE_MAX_BYTES = 512 * 1024
LOG_FILE_BACKUPS = 1

_installed_handlers: List[logging.Handler] = []


def rules_for_level(level: str) -> str:
    """Rule string enabling ``level`` and everything more severe.

    ``"off"`` disables all categories; unknown levels give ``""``.
    """
    normalized = (level or "").lower()
    if normalized not in LEVELS and normalized != "off":
        return ""

    threshold = LEVELS.index(normalized) if normalized in LEVELS else len(LEVELS)
    rules = []
    for category in CATEGORIES:
        for index, name in enumerate(LEVELS):
            enabled = "true" if index >= threshold else "false"
            rules.append(f"{category}.{name}={enabled}")
    return "\n".join(rules)


def parse_rules(text: str) -> Dict[str, int]:
    """Resolve rule strings to a logging level per category.

    Rules are separated by newlines or semicolons. A category of ``*``
    applies to every category. Each category gets its lowest enabled
    level, or :data:`LEVEL_OFF` when every mentioned level is disabled.
    Malformed rules are ignored.
    """
    enabled: Dict[str, set] = {}
    mentioned = set()

    for raw in text.replace(";", "\n").splitlines():
        rule = raw.strip()
        if not rule or "=" not in rule:
            continue
        key, value = (part.strip() for part in rule.split("=", 1))
        category, _, level = key.rpartition(".")
        level = level.lower()
        if not category or level not in LEVELS:
            continue

        targets = CATEGORIES if category == "*" else (category,)
        for target in targets:
            mentioned.add(target)
            levels = enabled.setdefault(target, set())
            if value.lower() == "true":
                levels.add(level)
            else:
                levels.discard(level)

    resolved = {}
    for category in mentioned:
        levels = enabled.get(category, set())
        if levels:
            resolved[category] = min(LEVEL_VALUES[name] for name in levels)
        else:
            resolved[category] = LEVEL_OFF
    return resolved


def initialize(
    level: Optional[str] = None,
    rules: Optional[str] = None,
    log_file: Optional[str | Path] = None,
) -> Dict[str, int]:
    """Configure trackspline logging.

    Args:
        level: Verbosity for all categories (debug, info, warning, critical, off)
        rules: Explicit rule string; overrides ``level``. Falls back to the
            ``TRACKSPLINE_LOG_RULES`` environment variable.
        log_file: Optional log file, rotated at 512 KiB

    Returns:
        Resolved level per category
    """
    if rules is None and level:
        rules = rules_for_level(level)
    if rules is None:
        rules = os.environ.get(RULES_ENV_VAR, "")

    root = logging.getLogger("trackspline")
    for handler in _installed_handlers:
        root.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(RotatingFileHandler(
            log_file,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
        ))

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
        _installed_handlers.append(handler)
    root.setLevel(logging.INFO)

    levels = parse_rules(rules)
    for category in CATEGORIES:
        logging.getLogger(category).setLevel(levels.get(category, logging.NOTSET))

    logging.getLogger("trackspline.app").debug("Logging initialized: %s", levels)
    return levels
