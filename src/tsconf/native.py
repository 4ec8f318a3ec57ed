"""Direct execution of config files through the host module system.

The host here is the Python import machinery. A config source whose suffix
has no importlib loader (e.g. `.ts`) cannot be interpreted natively, which is
reported as an *environment incapable* outcome so that the caller can fall
back to compilation. Any other failure is a genuine problem with the config
file and is handed back untouched.
"""

import asyncio
import importlib.machinery
import importlib.util
import inspect
import os
import secrets
import sys
import types
from typing import Any, Dict, Optional, Union

from .errors import UnsupportedSourceError
from .models import NativeLoadResult

__all__ = ["ModuleLoader", "ImportlibModuleLoader", "load_native", "module_bindings"]


class ModuleLoader:
    """Capability that executes a module by file path and returns its exports.

    Subclasses must raise :class:`UnsupportedSourceError` when they cannot
    interpret the kind of source they are given.
    """

    def load(self, path: str) -> Dict[str, Any]:
        """Execute a module and return its bindings.

        Parameters
        ----------
        path : str
            Absolute path to the module

        Returns
        -------
        Dict[str, Any]
            Name to value exports of the module
        """
        raise NotImplementedError


class _NoBytecodeLoader(importlib.machinery.SourceFileLoader):
    """Source loader that never writes a `__pycache__` entry."""

    def set_data(self, path, data, *, _mode=0o666):
        """Skip bytecode caching next to the source file."""


def module_bindings(module: types.ModuleType) -> Dict[str, Any]:
    """Extract the exported bindings of an executed module.

    If the module defines `__all__`, exactly those names are exported.
    Otherwise every public name is, except imported modules and classes or
    functions that were defined in another module.

    Parameters
    ----------
    module : types.ModuleType
        Executed module

    Returns
    -------
    Dict[str, Any]
        Name to value exports
    """
    namespace = vars(module)
    if "__all__" in namespace:
        return {name: namespace[name] for name in namespace["__all__"]}

    bindings = {}
    for name, value in namespace.items():
        if name.startswith("_") or isinstance(value, types.ModuleType):
            continue
        if inspect.isclass(value) or inspect.isroutine(value):
            if getattr(value, "__module__", None) != module.__name__:
                continue
        bindings[name] = value

    return bindings


class ImportlibModuleLoader(ModuleLoader):
    """Module loader backed by :mod:`importlib`.

    Each execution uses a fresh, randomly named module that is removed from
    :data:`sys.modules` afterwards, so nothing is cached between loads.
    """

    def load(self, path: str) -> Dict[str, Any]:
        name = f"_tsconf_config_{secrets.token_hex(8)}"
        spec = importlib.util.spec_from_file_location(name, path)
        if spec is None or spec.loader is None:
            raise UnsupportedSourceError(
                f"No module loader is available for '{os.path.splitext(path)[1]}' "
                f"files: {path}"
            )

        if type(spec.loader) is importlib.machinery.SourceFileLoader:
            spec = importlib.util.spec_from_file_location(
                name, path, loader=_NoBytecodeLoader(name, path)
            )

        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        finally:
            sys.modules.pop(name, None)

        return module_bindings(module)


async def load_native(
    path: Union[str, os.PathLike], loader: Optional[ModuleLoader] = None
) -> NativeLoadResult:
    """Attempt to execute a config file directly.

    This only works for sources the host can interpret (Python modules). The
    result tells apart an unsupported source kind, which should trigger the
    compile fallback, from a real error raised by the config file.

    Parameters
    ----------
    path : Union[str, os.PathLike]
        Absolute path to the config file
    loader : ModuleLoader, optional
        Module loader capability (defaults to :class:`ImportlibModuleLoader`)

    Returns
    -------
    NativeLoadResult
        Bindings on success, classified error otherwise
    """
    if loader is None:
        loader = ImportlibModuleLoader()

    try:
        bindings = await asyncio.to_thread(loader.load, os.fspath(path))
    except UnsupportedSourceError as exc:
        return NativeLoadResult(success=False, environment_incapable=True, error=exc)
    except Exception as exc:
        # A genuine problem with the config file (syntax, runtime, imports)
        return NativeLoadResult(success=False, environment_incapable=False, error=exc)

    return NativeLoadResult(success=True, bindings=bindings)
