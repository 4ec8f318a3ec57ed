"""Config resolution pipeline.

This module ties the loading stages together:

1. Validate that the config path is absolute
2. If the file is missing, optionally bootstrap it from a default object
3. Execute the file natively, or compile it first if the host cannot
   interpret it
4. Pick the configuration object among the module exports

Public Functions
----------------
load_config : Resolve a config file with the default capabilities
"""

import os
from pathlib import Path
from typing import Any, Optional, Union

from .compilers import Compiler
from .errors import ConfigLoadError, ErrorCause
from .exports import resolve_export
from .fallback import compile_and_load
from .models import CreationRequest
from .native import ImportlibModuleLoader, ModuleLoader, load_native
from .utils.logger import logger
from .writer import write_config_file

__all__ = ["ConfigResolver", "load_config"]


class ConfigResolver:
    """Resolve configuration objects from config source files.

    The module execution and compilation steps are delegated to injectable
    capabilities so that they can be swapped (e.g. with fakes in tests).

    Parameters
    ----------
    loader : ModuleLoader, optional
        Module loader capability (default: :class:`ImportlibModuleLoader`)
    compiler : Compiler, optional
        Compiler used by the fallback (default: picked from the file suffix)
    scratch_dir : Union[str, os.PathLike], optional
        Directory for compiled scratch modules (default: $TSCONF_SCRATCH_DIR
        or the system temporary directory)
    """

    def __init__(
        self,
        loader: Optional[ModuleLoader] = None,
        compiler: Optional[Compiler] = None,
        scratch_dir: Optional[Union[str, os.PathLike]] = None,
    ):
        self.loader = loader if loader is not None else ImportlibModuleLoader()
        self.compiler = compiler
        self.scratch_dir = Path(scratch_dir) if scratch_dir is not None else None

    async def resolve(
        self,
        path: Union[str, os.PathLike],
        creation_request: Optional[CreationRequest] = None,
    ) -> Any:
        """Load a config file.

        Supports files that export a default object or a single named export.

        Parameters
        ----------
        path : Union[str, os.PathLike]
            Absolute path to the config file
        creation_request : CreationRequest, optional
            If present and the file does not exist, write a file from the
            provided default config. By default this still fails with
            `halt_and_check` so the generated file can be reviewed.

        Returns
        -------
        Any
            The default export (if it is an object) or the only named export

        Raises
        ------
        ConfigLoadError
            Tagged with the cause of the failure
        Exception
            Any error raised while executing the config file, unchanged
        """
        path = os.fspath(path)
        if not os.path.isabs(path):
            raise ConfigLoadError(
                f'Path must be absolute: received "{path}"',
                cause=ErrorCause.INVALID_PATH,
                reason="not_absolute_path",
            )

        if not os.path.exists(path):
            return await self._create(path, creation_request)

        result = await load_native(path, self.loader)
        if result.success:
            bindings = result.bindings
        elif result.environment_incapable:
            logger.info(
                "No native loader for '%s' files. Switching to transpilation.",
                Path(path).suffix,
            )
            bindings = await compile_and_load(
                path, self.compiler, self.loader, self.scratch_dir
            )
        else:
            raise result.error

        return resolve_export(bindings)

    async def _create(
        self, path: str, creation_request: Optional[CreationRequest]
    ) -> Any:
        """Handle a missing config file."""
        if creation_request is None:
            raise ConfigLoadError(
                f'File not found: received "{path}"', cause=ErrorCause.FILE_NOT_FOUND
            )

        await write_config_file(path, creation_request)
        if creation_request.immediately_use:
            logger.warning("Created config file at %s with default settings", path)
            return creation_request.default_config

        raise ConfigLoadError(
            f'A config file has been created at "{path}". Please check the options '
            "and re-run this.",
            cause=ErrorCause.HALT_AND_CHECK,
        )


async def load_config(
    path: Union[str, os.PathLike],
    create_if_not_found: Optional[CreationRequest] = None,
) -> Any:
    """Load a config file with the default capabilities.

    Parameters
    ----------
    path : Union[str, os.PathLike]
        Absolute path to the config file
    create_if_not_found : CreationRequest, optional
        Default config written when the file does not exist

    Returns
    -------
    Any
        Configuration object

    Examples
    --------
    >>> config = await load_config("/srv/app/app.config.ts")
    >>> config["port"]
    8080

    See Also
    --------
    ConfigResolver.resolve : Same operation with injectable capabilities
    """
    return await ConfigResolver().resolve(path, create_if_not_found)
