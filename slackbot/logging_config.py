"""Logging for slackbot.

Every module logs through structlog under one of three names:
``slackbot.bot`` (facade, dispatcher, config), ``slackbot.session``
(RTM connection) and ``slackbot.commands`` (registry and built-ins).
Events are rendered by the stdlib handlers attached to the
``slackbot`` logger: readable lines on stderr, JSON lines in a
rotating ``slackbot.log``. Slack tokens are scrubbed before either
sees them.
"""

import logging
import logging.handlers
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog

LOGGER_PREFIX = "slackbot"

# Short name -> stdlib logger used by the package
LOGGERS = {
    "bot": f"{LOGGER_PREFIX}.bot",
    "session": f"{LOGGER_PREFIX}.session",
    "commands": f"{LOGGER_PREFIX}.commands",
}

LOG_FILE = "slackbot.log"

_TOKEN_RE = re.compile(
    r"\b(?:xox[abeps]|xapp)-[A-Za-z0-9-]{10,}"
    r"|Bearer\s+[A-Za-z0-9_./-]{20,}"
)
_REDACTED = "***REDACTED***"

# Handlers added by the last setup_logging call
_handlers: List[logging.Handler] = []


def _scrub(value: Any) -> Any:
    if isinstance(value, str):
        return _TOKEN_RE.sub(_REDACTED, value)
    if isinstance(value, dict):
        return {k: _scrub(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(_scrub(v) for v in value)
    return value


def sanitize_secrets(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """structlog processor replacing Slack tokens and bearer headers.

    Nested lists, tuples and dicts are walked too, so a token inside
    an API payload logged as context is caught as well.
    """
    return {key: _scrub(value) for key, value in event_dict.items()}


def _level(name: Optional[str], default: int) -> int:
    if not name:
        return default
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else default


def _file_handler(log_dir: Path, max_bytes: int, backup_count: int) -> Optional[logging.Handler]:
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        return logging.handlers.RotatingFileHandler(
            log_dir / LOG_FILE,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        print(f"slackbot: file logging disabled ({e})", file=sys.stderr)
        return None


def setup_logging(config=None) -> None:
    """Configure structlog and the ``slackbot`` logger tree.

    Called once with no config so startup messages are visible, then
    again with the loaded Config. Calling it again replaces the
    handlers the previous call installed and leaves others alone.

    Args:
        config: Config providing ``log_dir``, ``logging_level``,
            ``logging_subsystem_levels`` (keyed by the short names in
            LOGGERS), ``logging_max_file_size_mb`` and
            ``logging_backup_count``. Without it the console is used
            at INFO and nothing is written to disk.
    """
    base_level = _level(config.logging_level if config else None, logging.INFO)
    overrides = config.logging_subsystem_levels if config else {}

    shared = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(),
        ],
    ))
    handlers: List[logging.Handler] = [console]

    if config is not None:
        logfile = _file_handler(
            Path(config.log_dir),
            config.logging_max_file_size_mb * 1024 * 1024,
            config.logging_backup_count,
        )
        if logfile is not None:
            logfile.setFormatter(structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=shared,
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.JSONRenderer(),
                ],
            ))
            handlers.append(logfile)

    package_logger = logging.getLogger(LOGGER_PREFIX)
    for old in _handlers:
        package_logger.removeHandler(old)
        old.close()
    _handlers[:] = handlers
    for handler in handlers:
        package_logger.addHandler(handler)
    package_logger.setLevel(base_level)
    package_logger.propagate = False

    for short_name, logger_name in LOGGERS.items():
        logging.getLogger(logger_name).setLevel(
            _level(overrides.get(short_name), base_level)
        )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            sanitize_secrets,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Loggers bound before the config is read must pick up the second call
        cache_logger_on_first_use=config is not None,
    )
