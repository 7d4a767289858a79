"""
Logging configuration for the enrichment service.
Supports normal mode (concise console) and debug mode (verbose with file output).
"""
import logging
import sys
import os
from pathlib import Path

# Debug mode: set ENRICHMENT_DEBUG=1 to enable verbose enrichment logging
ENRICHMENT_DEBUG = os.getenv('ENRICHMENT_DEBUG', '').lower() in ('1', 'true', 'yes')

# Debug log file path
DEBUG_LOG_PATH = Path(__file__).parent.parent / 'enrichment_debug.log'

# Logger tree that receives the debug file handler
SERVICES_LOGGER = 'enrichment_app.services'


class ConciseFormatter(logging.Formatter):
    """Single-line, concise log format."""

    FORMATS = {
        logging.DEBUG: "\033[90m[D]\033[0m %(name)s: %(message)s",
        logging.INFO: "\033[32m[I]\033[0m %(message)s",
        logging.WARNING: "\033[33m[W]\033[0m %(message)s",
        logging.ERROR: "\033[31m[E]\033[0m %(name)s: %(message)s",
        logging.CRITICAL: "\033[31;1m[!]\033[0m %(name)s: %(message)s",
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno, self.FORMATS[logging.INFO])
        formatter = logging.Formatter(log_fmt)
        return formatter.format(record)


class VerboseFormatter(logging.Formatter):
    """Detailed format for debug file logging."""
    def __init__(self):
        super().__init__(
            fmt='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )


def setup_logging(level=logging.INFO, debug: bool = ENRICHMENT_DEBUG):
    """
    Configure logging for the entire application.
    Call this once at startup.

    Set ENRICHMENT_DEBUG=1 (or pass debug=True) to write verbose
    resolver/decoder logs to enrichment_debug.log.
    """
    # Silence noisy third-party loggers
    noisy_loggers = [
        'urllib3', 'asyncio', 'websockets', 'aiohttp',
        'web3', 'web3.providers', 'web3.RequestManager', 'web3.manager',
    ]
    for logger_name in noisy_loggers:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ConciseFormatter())
    root.addHandler(handler)

    app_logger = logging.getLogger('enrichment_app')
    app_logger.setLevel(level)

    if debug:
        setup_enrichment_debug_logging()
        app_logger.info(f"ENRICHMENT_DEBUG enabled - verbose logs written to {DEBUG_LOG_PATH}")

    return app_logger


def setup_enrichment_debug_logging(path: Path = DEBUG_LOG_PATH):
    """
    Set up verbose debug logging for the services tree (decoders, resolver,
    coordinator). Writes detailed logs to the debug log file.
    """
    services_logger = logging.getLogger(SERVICES_LOGGER)
    services_logger.setLevel(logging.DEBUG)
    if any(getattr(h, 'name', None) == 'enrichment_debug_file' for h in services_logger.handlers):
        return

    file_handler = logging.FileHandler(path, mode='w', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(VerboseFormatter())
    file_handler.name = 'enrichment_debug_file'
    services_logger.addHandler(file_handler)
