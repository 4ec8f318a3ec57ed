"""Compile-then-load fallback for config sources the host cannot interpret.

The compiled module is written to a uniquely named scratch file, executed
once through the module loader and deleted again, whatever the outcome of
the execution.
"""

import asyncio
import os
import secrets
import tempfile
from contextlib import contextmanager, suppress
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Union

from .api import ENV_SCRATCH_DIR, SCRATCH_PREFIX, SCRATCH_SUFFIX, SCRATCH_TOKEN_BYTES
from .compilers import Compiler, get_compiler
from .errors import ConfigLoadError, ErrorCause
from .native import ImportlibModuleLoader, ModuleLoader
from .utils.logger import logger

__all__ = ["compile_and_load", "get_scratch_dir", "scratch_file"]


def get_scratch_dir() -> Path:
    """Get the directory where compiled scratch modules are written.

    Defaults to the system temporary directory. Can be overridden with the
    TSCONF_SCRATCH_DIR environment variable.

    Returns
    -------
    Path
        Path to the scratch directory
    """
    scratch_dir = os.environ.get(ENV_SCRATCH_DIR)
    if scratch_dir:
        return Path(scratch_dir)

    return Path(tempfile.gettempdir())


def scratch_path(scratch_dir: Path) -> Path:
    """Build an unguessable scratch file path from a random token."""
    token = secrets.token_hex(SCRATCH_TOKEN_BYTES)
    return scratch_dir / f"{SCRATCH_PREFIX}{token}{SCRATCH_SUFFIX}"


@contextmanager
def scratch_file(code: str, scratch_dir: Optional[Path] = None) -> Iterator[Path]:
    """Write code to a scratch file that only lives for the `with` block.

    The file is removed on every exit path. Removal problems are ignored as
    they must not hide the outcome of the block.

    Parameters
    ----------
    code : str
        Contents of the scratch file
    scratch_dir : Path, optional
        Directory to write into (default: from get_scratch_dir())

    Yields
    ------
    Path
        Path to the scratch file
    """
    if scratch_dir is None:
        scratch_dir = get_scratch_dir()

    path = scratch_path(Path(scratch_dir))
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(code, encoding="utf-8")
        yield path

    finally:
        with suppress(OSError):
            path.unlink()


def _load_scratch(
    code: str, loader: ModuleLoader, scratch_dir: Optional[Path], source: str
) -> Dict[str, Any]:
    with scratch_file(code, scratch_dir) as scratch:
        logger.debug("Loading compiled %s from %s", source, scratch)
        return loader.load(str(scratch))


async def compile_and_load(
    path: Union[str, os.PathLike],
    compiler: Optional[Compiler] = None,
    loader: Optional[ModuleLoader] = None,
    scratch_dir: Optional[Path] = None,
) -> Dict[str, Any]:
    """Compile a config source and load the result as a module.

    Parameters
    ----------
    path : Union[str, os.PathLike]
        Absolute path to the config source
    compiler : Compiler, optional
        Compiler capability (default: picked from the file suffix)
    loader : ModuleLoader, optional
        Module loader capability (default: :class:`ImportlibModuleLoader`)
    scratch_dir : Path, optional
        Directory for the scratch module (default: from get_scratch_dir())

    Returns
    -------
    Dict[str, Any]
        Bindings exported by the compiled module

    Raises
    ------
    ConfigLoadError
        With cause `transpile_failed` if no compiler output was produced
    """
    path = os.fspath(path)
    if compiler is None:
        compiler = get_compiler(path)
    if compiler is None:
        raise ConfigLoadError(
            f"Could not transpile the config file: no compiler handles "
            f"'{Path(path).suffix}' files.",
            cause=ErrorCause.TRANSPILE_FAILED,
            reason="unsupported_source",
        )
    if loader is None:
        loader = ImportlibModuleLoader()

    code = await compiler.compile(path)
    if not code:
        raise ConfigLoadError(
            "Could not transpile the config file.", cause=ErrorCause.TRANSPILE_FAILED
        )

    # Scratch write, execution and removal run as one unit in the worker
    return await asyncio.to_thread(_load_scratch, code, loader, scratch_dir, path)
