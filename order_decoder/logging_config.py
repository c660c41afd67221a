"""
Logging configuration for the order decoder.
Supports normal mode (concise) and debug mode (verbose with file output).
"""
import logging
import sys
import os
from pathlib import Path

# Debug mode: set DECODER_DEBUG=1 to enable verbose decoder logging
DECODER_DEBUG = os.getenv('DECODER_DEBUG', '').lower() in ('1', 'true', 'yes')

# Debug log file path
DEBUG_LOG_PATH = Path.cwd() / 'decoder_debug.log'

APP_LOGGER_NAME = 'order_decoder'


class ConciseFormatter(logging.Formatter):
    """
    One line per message on stderr, tagged [D]/[I]/[W]/[E]/[!].

    Colour codes are only added when the stream is a terminal, so redirected
    diagnostics stay plain text.
    """

    TAGS = {
        logging.DEBUG: ("[D]", "90"),
        logging.INFO: ("[I]", "32"),
        logging.WARNING: ("[W]", "33"),
        logging.ERROR: ("[E]", "31"),
        logging.CRITICAL: ("[!]", "31;1"),
    }

    def __init__(self, color: bool = False):
        super().__init__()
        self.color = color

    def format(self, record):
        tag, code = self.TAGS.get(record.levelno, self.TAGS[logging.INFO])
        if self.color:
            tag = f"\033[{code}m{tag}\033[0m"
        # Warnings and info are user-facing; others name the emitting module
        if record.levelno in (logging.INFO, logging.WARNING):
            return f"{tag} {record.getMessage()}"
        return f"{tag} {record.name}: {record.getMessage()}"


class VerboseFormatter(logging.Formatter):
    """Debug file format: timestamp, level, module and line."""
    def __init__(self):
        super().__init__(
            fmt='%(asctime)s.%(msecs)03d %(levelname)-8s %(name)s:%(lineno)d %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )


def setup_logging(level=logging.INFO, debug: bool = DECODER_DEBUG):
    """
    Configure logging for the decoder CLI.
    Call this once at startup.

    Diagnostics go to stderr so the narration on stdout stays clean.
    Set DECODER_DEBUG=1 to also write verbose decoder logs to a file.
    """
    # Silence noisy third-party loggers
    noisy_loggers = [
        'urllib3', 'asyncio', 'web3', 'web3.providers', 'web3.RequestManager',
        'web3.manager.RequestManager',
    ]
    for logger_name in noisy_loggers:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ConciseFormatter(color=sys.stderr.isatty()))
    root.addHandler(handler)

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(level)

    if debug:
        setup_decoder_debug_logging()
        app_logger.info(f"DECODER_DEBUG enabled - verbose logs written to {DEBUG_LOG_PATH}")

    return app_logger


def setup_decoder_debug_logging():
    """
    Set up verbose debug logging for decoder modules.
    Writes detailed logs to decoder_debug.log file.
    """
    file_handler = logging.FileHandler(DEBUG_LOG_PATH, mode='w', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(VerboseFormatter())
    file_handler.name = 'decoder_debug_file'

    # The package logger catches every child module's messages
    parent_logger = logging.getLogger(APP_LOGGER_NAME)
    parent_logger.setLevel(logging.DEBUG)
    if not any(getattr(h, 'name', None) == 'decoder_debug_file' for h in parent_logger.handlers):
        parent_logger.addHandler(file_handler)

    # Keep the console concise while the file gets everything
    for handler in logging.getLogger().handlers:
        if handler.level == logging.NOTSET:
            handler.setLevel(logging.INFO)
