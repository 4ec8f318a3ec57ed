"""Constants shared by the tsconf configuration loading pipeline.

This module defines the generated file layout, the scratch file naming
scheme and the environment variables used to configure the external tools.
"""

# Banner placed at the top of every generated config file
REVIEW_BANNER = "Please review and adjust these settings as needed for your project."

# Name of the constant exported by generated config files
EXPORT_IDENTIFIER = "config"

# Reserved binding name for a module's default export
DEFAULT_EXPORT = "default"

# Scratch files produced by the compile fallback
SCRATCH_PREFIX = "tsconf-config-"
SCRATCH_SUFFIX = ".py"
SCRATCH_TOKEN_BYTES = 16

# Environment variables
ENV_SCRATCH_DIR = "TSCONF_SCRATCH_DIR"
ENV_ESBUILD = "TSCONF_ESBUILD"
ENV_NODE = "TSCONF_NODE"
ENV_COMPILER_TIMEOUT = "TSCONF_COMPILER_TIMEOUT"

# Default values
DEFAULT_ESBUILD = "esbuild"
DEFAULT_NODE = "node"
DEFAULT_COMPILER_TIMEOUT = 60.0

# Source kinds, by file suffix
SCRIPT_SUFFIXES = {".ts", ".mts", ".cts", ".tsx", ".js", ".mjs", ".cjs", ".jsx"}
PYTHON_SUFFIXES = {".py"}
YAML_SUFFIXES = {".yaml", ".yml"}
JSON_SUFFIXES = {".json"}
