import logging
import os
from logging.handlers import RotatingFileHandler
from cafe_finder.core.config import settings

class LoggerConfig:
    """
    Logger configuration class to setup logging for the application.
    """
    def __init__(
        self, env=20, logger_name="CafeFinder", log_directory="logs", log_file="app.log"
    ):
        try:
            self.logger_name = logger_name
            self.log_directory = os.path.abspath(log_directory)
            self.log_file_path = os.path.join(self.log_directory, log_file)
            self.env = env
            self.log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

            self.logger = logging.getLogger(self.logger_name)
            self.setup_logger()
        except OSError as e:
            print(f"Failed to initialize logger: {str(e)}")

    def setup_logger(self):
        # Console first so the logger still works if the log directory is read-only
        console_handler = logging.StreamHandler()
        console_handler.setLevel(self.env)
        formatter = logging.Formatter(self.log_format)
        console_handler.setFormatter(formatter)

        handlers = [console_handler]
        try:
            os.makedirs(self.log_directory, exist_ok=True)
            file_handler = RotatingFileHandler(
                self.log_file_path, backupCount=5, maxBytes=1024 * 1024 * 10, encoding="utf-8"
            )
            file_handler.setLevel(self.env)
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)
        except OSError as e:
            print(f"Failed to setup file log handler: {str(e)}")

        # Avoid adding duplicate handlers if re-initialized
        if not self.logger.hasHandlers():
            for handler in handlers:
                self.logger.addHandler(handler)

        self.logger.setLevel(self.env)

    def log(self, level: int, message: str, extra: dict = None):
        """Simple wrapper to log messages"""
        if extra:
            message = f"{message} | {extra}"
        self.logger.log(level, message)

# Initialize Logger
logs = LoggerConfig(
    env=settings.LOGGER,
    logger_name="CAFE-BE",
    log_directory=settings.LOG_DIRECTORY,
    log_file="app.log"
)
