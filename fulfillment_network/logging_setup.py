import logging
import logging.handlers
from pathlib import Path

from fulfillment_network.config import config

APP_LOGGER_NAME = 'fulfillment_network'


class Logger:
    """Logging manager for the Fulfillment Network.

    All loggers handed out live under the ``fulfillment_network`` namespace.
    Only that top-level logger carries handlers: a rotating file in the
    configured directory and, optionally, the console. Children reach them
    through propagation.
    """

    _instance = None
    _loggers = {}

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Logger, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Configure the application logger once per process."""
        if self._initialized:
            return

        self._log_config = config.log_config
        self._log_dir = Path(self._log_config['directory'])
        self._log_dir.mkdir(parents=True, exist_ok=True)

        self._app_logger = self._configure_app_logger()
        self._initialized = True

    def _configure_app_logger(self):
        app_logger = logging.getLogger(APP_LOGGER_NAME)
        app_logger.setLevel(getattr(logging, self._log_config['level'].upper(), logging.INFO))

        for handler in app_logger.handlers[:]:
            app_logger.removeHandler(handler)
        for handler in self._build_handlers():
            app_logger.addHandler(handler)

        # Keep records out of the root logger's handlers, e.g. under pytest
        app_logger.propagate = False
        self._loggers[APP_LOGGER_NAME] = app_logger
        return app_logger

    def _build_handlers(self):
        formatter = logging.Formatter(self._log_config['format'])

        file_handler = logging.handlers.RotatingFileHandler(
            self._log_dir / f"{APP_LOGGER_NAME}.log",
            maxBytes=self._log_config['max_size_mb'] * 1024 * 1024,
            backupCount=self._log_config['backup_count']
        )
        handlers = [file_handler]

        if self._log_config['console_output']:
            handlers.append(logging.StreamHandler())

        for handler in handlers:
            handler.setFormatter(formatter)
        return handlers

    def get_logger(self, name):
        """Get a logger inside the application namespace.

        Args:
            name: Module name such as ``fulfillment_network.db``, or a short
                name such as ``cli`` which is placed under the namespace

        Returns:
            Logger instance
        """
        if name in self._loggers:
            return self._loggers[name]

        qualified = name
        if name != APP_LOGGER_NAME and not name.startswith(f"{APP_LOGGER_NAME}."):
            qualified = f"{APP_LOGGER_NAME}.{name}"

        logger = logging.getLogger(qualified)
        self._loggers[name] = logger
        return logger

    def log_exception(self, logger_name, exception, message=None):
        """Log an exception together with its stack trace.

        Args:
            logger_name: Logger name
            exception: Exception object
            message: Optional message to include
        """
        text = f"{message}: {exception}" if message else str(exception)
        self.get_logger(logger_name).error(
            text, exc_info=(type(exception), exception, exception.__traceback__)
        )

    @property
    def app_logger(self):
        """Get the application logger."""
        return self._app_logger

# Global logger instance
logger = Logger()

def get_logger(name):
    """Get a logger with the specified name."""
    return logger.get_logger(name)

def log_exception(logger_name, exception, message=None):
    """Log an exception with stack trace."""
    logger.log_exception(logger_name, exception, message)
