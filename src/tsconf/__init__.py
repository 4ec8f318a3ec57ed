"""Load structured configuration objects from typed script config files.

This package resolves a configuration object from a config source file
(TypeScript, JavaScript, Python, YAML or JSON) with:
- Absolute path validation
- Bootstrapping of missing files from a default object
- Native execution first, compile-then-load fallback second
- Disambiguation of the module exports
- A closed set of tagged error causes

Main Entry Points
-----------------
load_config : Resolve a config file
load_config_with_schema : Resolve and validate a config file
create_config_file : Write a new config file from a default object
"""

from .compilers import Compiler, EsbuildCompiler, JsonCompiler, YamlCompiler
from .errors import (
    CompilerError,
    ConfigLoadError,
    ErrorCause,
    UnsupportedSourceError,
    is_known_cause,
)
from .exports import resolve_export
from .fallback import compile_and_load
from .models import (
    CreationRequest,
    LocalSource,
    NativeLoadResult,
    PackageSource,
    TypeConstraint,
)
from .native import ImportlibModuleLoader, ModuleLoader, load_native
from .resolver import ConfigResolver, load_config
from .schema import load_config_with_schema
from .version import __version__
from .writer import render_config_source, write_config_file

create_config_file = write_config_file

__all__ = [
    "load_config",
    "load_config_with_schema",
    "create_config_file",
    "write_config_file",
    "render_config_source",
    "ConfigResolver",
    "load_native",
    "compile_and_load",
    "resolve_export",
    "ModuleLoader",
    "ImportlibModuleLoader",
    "Compiler",
    "EsbuildCompiler",
    "YamlCompiler",
    "JsonCompiler",
    "CreationRequest",
    "TypeConstraint",
    "PackageSource",
    "LocalSource",
    "NativeLoadResult",
    "ConfigLoadError",
    "ErrorCause",
    "CompilerError",
    "UnsupportedSourceError",
    "is_known_cause",
]
