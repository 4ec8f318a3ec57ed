"""Simple module which defines the package logger and returns it."""

import logging

# Initialize logger. Handlers are left to the application (see the CLI).
logger = logging.getLogger("tsconf")
