"""Define logging configuration shared by the trajectory optimization packages."""

import logging

# Log format shared by console and file handlers
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class CustomFormatter(logging.Formatter):
    """Custom formatter to add hardcoded colors based on log levels."""

    # Define log level colors (ANSI escape codes)
    COLORS = {
        logging.DEBUG: "\033[36m",  # Cyan
        logging.WARNING: "\033[33m",  # Yellow
        logging.ERROR: "\033[31m",  # Red
        logging.CRITICAL: "\033[35;1m",  # Bright Magenta
    }
    RESET = "\033[0m"  # Reset color

    def format(self, record):
        # Color a copy so the file handler still receives the plain message
        colored_record = logging.makeLogRecord(record.__dict__)
        levelname_color = self.COLORS.get(record.levelno, "")
        colored_record.msg = f"{levelname_color}{record.getMessage()}{self.RESET}"
        colored_record.args = None
        return super().format(colored_record)


def create_logger(name, level=logging.INFO, log_file=None):
    """
    Create a custom logger with hardcoded colored output for each log level.

    Calling this repeatedly with the same name returns the already configured
    logger instead of stacking another console handler on it.

    Args:
        name (str): Name of the logger, typically `__name__`.
        level (int): Logging level (e.g., logging.DEBUG, logging.INFO).
        log_file (str, optional): File to log messages (in addition to console).

    Returns:
        logging.Logger: Configured logger instance.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    # Only attach the console handler once per logger
    if not any(getattr(handler, "_trajopt_console", False) for handler in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(CustomFormatter(LOG_FORMAT))
        console_handler._trajopt_console = True
        logger.addHandler(console_handler)

    # Create file handler (if log_file is provided)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))  # No colors for file
        logger.addHandler(file_handler)

    return logger


def set_package_log_level(level, package_prefix="direct_trajopt"):
    """Set the level of every already created logger under the package prefix."""
    for logger_name, logger in logging.Logger.manager.loggerDict.items():
        if isinstance(logger, logging.Logger) and logger_name.startswith(package_prefix):
            logger.setLevel(level)
