import logging
import os
from datetime import datetime
from typing import Optional

def setup_logger(name, log_dir: Optional[str] = 'logs', level=logging.DEBUG):
    """
    Basic Custom Logging formatting and handling

    Parameters
    name (str) : Name of the logger
    log_dir (str) : Folder for the dated log file. None or '' logs to the console only
    level (int) : Level for the logger and both handlers

    Returns:
    logging.Logger : Configured Logger Instance
    """

    # Create Logger
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Entry points may call this more than once
    if logger.handlers:
        return logger

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

        # Configs for how logs will appear in the log folder
        file_format = logging.Formatter(
            '%(levelname)s : %(name)s : %(funcName)s : %(lineno)d : %(message)s'
        )

        log_file = os.path.join(log_dir, f'incident_analytics_{datetime.now().strftime("%m%d%Y")}.log')
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(file_format)
        logger.addHandler(file_handler)

    # Console logs configs
    console_format = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s'
    )
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(console_format)

    # Add the config to the Logger obj
    logger.addHandler(console_handler)

    return logger
