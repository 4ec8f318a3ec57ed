"""Generation of new config files from a default object.

The rendered file depends on the target suffix:

- TypeScript/JavaScript (and any unknown suffix)::

      // Please review and adjust these settings as needed for your project.

      import type {AppConfig} from "./types.ts";

      export const config:AppConfig = {
          "port": 8080
      };

- Python: `config = {...}` preceded by a `#` banner
- JSON: the bare document
- YAML: the document preceded by a `#` banner

Only the TypeScript renderer can express a type constraint.
"""

import asyncio
import json
import os
import pprint
import tempfile
import warnings
from pathlib import Path
from typing import Any, Union

import yaml

from .api import (
    EXPORT_IDENTIFIER,
    JSON_SUFFIXES,
    PYTHON_SUFFIXES,
    REVIEW_BANNER,
    YAML_SUFFIXES,
)
from .errors import ConfigLoadError, ErrorCause
from .models import CreationRequest, LocalSource, TypeConstraint
from .utils.logger import logger

__all__ = ["render_config_source", "write_config_file", "type_import_source"]


def type_import_source(target_path: str, constraint: TypeConstraint) -> str:
    """Compute the module specifier used to import a type constraint.

    A package source is used verbatim. A local source is expressed relative to
    the directory holding the target file, with `/` separators, and always
    starts with `./` or `../`.

    Parameters
    ----------
    target_path : str
        Absolute path of the config file being generated
    constraint : TypeConstraint
        Type constraint to import

    Returns
    -------
    str
        Import specifier
    """
    if not isinstance(constraint.source, LocalSource):
        return constraint.source.package_name

    source = os.path.relpath(
        constraint.source.absolute_path, os.path.dirname(target_path)
    )
    source = source.replace(os.sep, "/")
    if not source.startswith(("./", "../")):
        source = f"./{source}"

    return source


def _render_script(path: str, request: CreationRequest) -> str:
    """Render a TypeScript module exporting the default config."""
    constraint = request.type_constraint
    annotation = f":{constraint.identifier}" if constraint else ""
    literal = json.dumps(request.default_config, indent=4, ensure_ascii=False)

    parts = [f"// {REVIEW_BANNER}"]
    if constraint:
        source = type_import_source(path, constraint)
        parts.append(f'import type {{{constraint.identifier}}} from "{source}";')
    parts.append(f"export const {EXPORT_IDENTIFIER}{annotation} = {literal};")

    return "\n\n".join(parts) + "\n"


def _render_python(path: str, request: CreationRequest) -> str:
    """Render a Python module binding the default config."""
    literal = pprint.pformat(
        _plain(request.default_config), indent=4, sort_dicts=False
    )
    return f"# {REVIEW_BANNER}\n\n{EXPORT_IDENTIFIER} = {literal}\n"


def _render_json(path: str, request: CreationRequest) -> str:
    """Render a JSON document holding the default config."""
    return json.dumps(request.default_config, indent=4, ensure_ascii=False) + "\n"


def _render_yaml(path: str, request: CreationRequest) -> str:
    """Render a YAML document holding the default config."""
    body = yaml.safe_dump(
        _plain(request.default_config),
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )
    return f"# {REVIEW_BANNER}\n\n{body}"


def _plain(value: Any) -> Any:
    """Round-trip a value through JSON so only plain containers remain."""
    return json.loads(json.dumps(value))


def render_config_source(path: Union[str, os.PathLike], request: CreationRequest) -> str:
    """Render the text of a new config file.

    Parameters
    ----------
    path : Union[str, os.PathLike]
        Absolute path of the file to generate (its suffix picks the format)
    request : CreationRequest
        Default config and optional type constraint

    Returns
    -------
    str
        File contents
    """
    path = os.fspath(path)
    suffix = Path(path).suffix.lower()

    if suffix in PYTHON_SUFFIXES:
        renderer = _render_python
    elif suffix in JSON_SUFFIXES:
        renderer = _render_json
    elif suffix in YAML_SUFFIXES:
        renderer = _render_yaml
    else:
        return _render_script(path, request)

    if request.type_constraint is not None:
        warnings.warn(
            f"Type constraint '{request.type_constraint.identifier}' cannot be "
            f"expressed in a '{suffix}' file and is ignored.",
            stacklevel=2,
        )

    return renderer(path, request)


def _default_file_mode() -> int:
    """Permissions a regular file gets from the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _write_atomic(path: Path, content: str, mode: int) -> None:
    """Write text to a temporary sibling file, then move it into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_fd, temp_path = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path)

    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.chmod(temp_path, mode)

        # Atomically move to final location (overwrites if exists)
        temp_path.replace(path)

    except BaseException:
        # Clean up temp file on error
        if temp_path.exists():
            temp_path.unlink()
        raise


def _validate_target(path: str) -> None:
    """Check that a path can be used as the target of a new config file."""
    if not os.path.isabs(path):
        raise ConfigLoadError(
            f'Path must be absolute: received "{path}"',
            cause=ErrorCause.INVALID_PATH,
            reason="not_absolute_path",
        )

    # A path without an extension is assumed to point at a directory
    if os.path.splitext(path)[1] == "":
        raise ConfigLoadError(
            f'The provided path "{path}" appears to be a directory because it '
            f"lacks a file extension. Please provide a complete path to a file "
            f'(e.g., "{path}.ts").',
            cause=ErrorCause.INVALID_PATH,
            reason="missing_extension",
        )


async def write_config_file(
    path: Union[str, os.PathLike], request: CreationRequest
) -> None:
    """Create a config file from a default object.

    Parameters
    ----------
    path : Union[str, os.PathLike]
        Absolute location to write the file to
    request : CreationRequest
        Default config and optional type constraint

    Raises
    ------
    ConfigLoadError
        With cause `invalid_path` if the path is relative or has no extension
    """
    path = os.fspath(path)
    _validate_target(path)

    content = render_config_source(path, request)
    await asyncio.to_thread(
        _write_atomic, Path(path), content, _default_file_mode()
    )

    logger.info("Wrote config file: %s", path)
