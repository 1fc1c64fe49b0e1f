"""
Centralized logging configuration for the Work-Time Tracker.
Provides component-specific loggers with separate log files.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, Dict, Any
from datetime import datetime

from ..config import get_config


DETAILED_FORMAT = (
    '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s'
)
SIMPLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class ComponentLogger:
    """Manages component-specific logging with separate files."""

    _loggers: Dict[str, logging.Logger] = {}
    _initialized = False
    _log_dir: Optional[Path] = None
    _to_file = True
    _debug = False

    # Component definitions with their log levels
    COMPONENTS = {
        'api': {'level': logging.INFO, 'file': 'api.log'},
        'database': {'level': logging.INFO, 'file': 'database.log'},
        'lifecycle': {'level': logging.INFO, 'file': 'lifecycle.log'},
        'stats': {'level': logging.INFO, 'file': 'stats.log'},
        'events': {'level': logging.INFO, 'file': 'events.log'},
        'websocket': {'level': logging.INFO, 'file': 'websocket.log'},
        'main': {'level': logging.INFO, 'file': 'main.log'},
        'error': {'level': logging.ERROR, 'file': 'errors.log'},  # Centralized error log
    }

    @classmethod
    def initialize(cls, log_dir: Optional[str] = None, debug: Optional[bool] = None) -> None:
        """
        Initialize the logging system with component-specific loggers.

        Args:
            log_dir: Directory for log files. Defaults to config.app.log_dir
            debug: Enable debug logging for all components. Defaults to config.server.debug
        """
        if cls._initialized:
            return

        config = get_config()
        cls._debug = config.server.debug if debug is None else debug
        cls._to_file = config.app.log_to_file

        if cls._to_file:
            # Session-specific subdirectory keeps restarts apart
            session_dir = datetime.now().strftime("%Y%m%d_%H%M%S")
            cls._log_dir = Path(log_dir or config.app.log_dir) / session_dir
            cls._log_dir.mkdir(parents=True, exist_ok=True)

        configured_level = getattr(logging, config.app.log_level.upper(), logging.INFO)
        root_level = logging.DEBUG if cls._debug else configured_level

        for component_name, component_config in cls.COMPONENTS.items():
            level = logging.DEBUG if cls._debug else max(component_config['level'], root_level)
            cls._loggers[component_name] = cls._build_logger(
                component_name, level, component_config['file']
            )

        if cls._to_file:
            unified_logger = logging.getLogger('worktime.unified')
            unified_logger.handlers.clear()
            unified_logger.setLevel(root_level)
            unified_logger.propagate = False
            unified_handler = logging.handlers.RotatingFileHandler(
                cls._log_dir / 'unified.log',
                maxBytes=20 * 1024 * 1024,  # 20MB
                backupCount=3,
                encoding='utf-8'
            )
            unified_handler.setLevel(root_level)
            unified_handler.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
            unified_logger.addHandler(unified_handler)
            cls._loggers['unified'] = unified_logger

            for name, logger in cls._loggers.items():
                if name != 'unified':
                    logger.addHandler(unified_handler)

        # Mark as initialized before logging to avoid recursion
        cls._initialized = True

        main_logger = cls._loggers['main']
        main_logger.debug(
            f"Logging initialized (debug={cls._debug}, log_dir={cls._log_dir or 'console'})"
        )

    @classmethod
    def _build_logger(cls, component: str, level: int, file_name: str) -> logging.Logger:
        logger = logging.getLogger(f"worktime.{component}")
        logger.handlers.clear()
        logger.propagate = False
        logger.setLevel(level)

        if cls._to_file and cls._log_dir is not None:
            file_handler = logging.handlers.RotatingFileHandler(
                cls._log_dir / file_name,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding='utf-8'
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
            logger.addHandler(file_handler)

        # Errors always reach the console; everything does when not logging to files
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level if not cls._to_file else logging.ERROR)
        console_handler.setFormatter(logging.Formatter(SIMPLE_FORMAT, datefmt='%H:%M:%S'))
        logger.addHandler(console_handler)

        return logger

    @classmethod
    def get_logger(cls, component: str) -> logging.Logger:
        """
        Get a logger for a specific component.

        Args:
            component: Component name (api, database, lifecycle, stats, ...)

        Returns:
            Logger instance for the component
        """
        if not cls._initialized:
            cls.initialize()

        if component not in cls._loggers:
            cls._create_component_logger(component)

        return cls._loggers[component]

    @classmethod
    def _create_component_logger(cls, component: str) -> None:
        """Create a component logger on-demand."""
        level = logging.DEBUG if cls._debug else logging.INFO
        logger = cls._build_logger(component, level, f'{component}.log')

        unified = cls._loggers.get('unified')
        if unified is not None:
            for handler in unified.handlers:
                logger.addHandler(handler)

        cls._loggers[component] = logger

    @classmethod
    def log_exception(cls, component: str, exc: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Log an exception with context to both component and error logs.

        Args:
            component: Component where the exception occurred
            exc: The exception to log
            context: Additional context information
        """
        component_logger = cls.get_logger(component)
        error_logger = cls.get_logger('error')

        context_str = ""
        if context:
            context_str = " | Context: " + ", ".join(f"{k}={v}" for k, v in context.items())

        component_logger.error(
            f"Exception in {component}: {type(exc).__name__}: {exc}{context_str}",
            exc_info=exc,
        )
        if error_logger is not component_logger:
            error_logger.error(
                f"[{component}] {type(exc).__name__}: {exc}{context_str}",
                exc_info=exc,
            )


# Convenience functions
def get_logger(component: str) -> logging.Logger:
    """Get a logger for a specific component."""
    return ComponentLogger.get_logger(component)


def initialize_logging(log_dir: Optional[str] = None, debug: Optional[bool] = None) -> None:
    """Initialize the logging system."""
    ComponentLogger.initialize(log_dir=log_dir, debug=debug)


def log_exception(component: str, exc: Exception, context: Optional[Dict[str, Any]] = None) -> None:
    """Log an exception with context."""
    ComponentLogger.log_exception(component, exc, context)
