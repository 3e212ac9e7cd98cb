import logging
import os

# This module provides the shared "patchpilot" logger used by the pipeline and CLI.
# Library modules log through logging.getLogger(__name__), which are children of it.

LOGGER_NAME = "patchpilot"
LOG_LEVEL_ENV = "PATCHPILOT_LOG_LEVEL"
LOG_PREFIX = "\033[35mPATCHPILOT\033[0m"

def get_logger():
   logger = logging.getLogger(LOGGER_NAME)

   # Configure only once, so repeated imports do not stack handlers
   if not logger.handlers:
      handler = logging.StreamHandler()
      handler.setFormatter(logging.Formatter(f"{LOG_PREFIX}: %(levelname)-8s %(message)s"))
      logger.addHandler(handler)

   # Keep records away from the root logger and any host application's handlers
   logger.propagate = False

   logger.setLevel(os.environ.get(LOG_LEVEL_ENV, 'INFO').upper())
   return logger

def set_log_level(level):
   """Change the level of the patchpilot logger (e.g. 'DEBUG' for --verbose)."""
   logging.getLogger(LOGGER_NAME).setLevel(level.upper() if isinstance(level, str) else level)

def configure_third_party_logging():
   """Keep the diff parsing and dotenv libraries quiet below WARNING"""
   for name in ('unidiff', 'dotenv'):
      logging.getLogger(name).setLevel(logging.WARNING)

logger = get_logger()
