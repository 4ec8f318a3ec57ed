#!/usr/bin/env python3
"""Command line entry point that resolves a config file and prints it as JSON."""

import argparse
import asyncio
import importlib
import json
import logging
import os
import sys
from typing import List, Optional

from tsconf.errors import ConfigLoadError
from tsconf.models import CreationRequest, LocalSource, PackageSource, TypeConstraint
from tsconf.resolver import load_config
from tsconf.schema import load_config_with_schema


def import_schema(reference: str):
    """Import a pydantic model from a `package.module:ClassName` reference.

    Parameters
    ----------
    reference : str
        Reference to the model class

    Returns
    -------
    type
        Model class
    """
    if ":" not in reference:
        raise ValueError(
            f"Invalid --schema format: '{reference}'. Expected format: 'module:ClassName'"
        )

    module_name, class_name = reference.split(":", 1)
    module = importlib.import_module(module_name)

    return getattr(module, class_name)


def build_creation_request(
    default: Optional[str],
    immediately_use: bool,
    type_identifier: Optional[str],
    type_package: Optional[str],
    type_path: Optional[str],
) -> Optional[CreationRequest]:
    """Assemble the creation request described by the command-line options.

    Parameters
    ----------
    default : str, optional
        Path to a JSON file holding the default config
    immediately_use : bool
        Use the default config right away instead of halting
    type_identifier : str, optional
        Name of the type annotating the generated config
    type_package : str, optional
        Package providing the type
    type_path : str, optional
        File providing the type

    Returns
    -------
    CreationRequest, optional
        Creation request, `None` if no default config was given
    """
    if default is None:
        return None

    with open(default, "r", encoding="utf-8") as f:
        default_config = json.load(f)

    type_constraint = None
    if type_identifier is not None:
        if type_package is not None:
            source = PackageSource(type_package)
        elif type_path is not None:
            source = LocalSource(os.path.abspath(type_path))
        else:
            raise ValueError("--type-identifier requires --type-package or --type-path")
        type_constraint = TypeConstraint(type_identifier, source)

    return CreationRequest(
        default_config=default_config,
        immediately_use=immediately_use,
        type_constraint=type_constraint,
    )


async def main(
    config: str,
    schema: Optional[type] = None,
    creation_request: Optional[CreationRequest] = None,
) -> str:
    """Resolve a config file and serialize it.

    Parameters
    ----------
    config : str
        Path to the config file, resolved against the working directory if
        relative
    schema : type, optional
        Pydantic model to validate against
    creation_request : CreationRequest, optional
        Default config written when the file does not exist

    Returns
    -------
    str
        JSON representation of the resolved config
    """
    path = os.path.abspath(config)
    if schema is not None:
        model = await load_config_with_schema(path, schema, creation_request)
        return model.model_dump_json(indent=4)

    result = await load_config(path, creation_request)

    return json.dumps(result, indent=4, default=str)


def cli(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Resolve a TypeScript (or JS/Python/YAML/JSON) config file "
        "and print it as JSON",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  tsconf-load app.config.ts
  tsconf-load app.config.ts --schema myapp.settings:AppConfig
  tsconf-load app.config.ts --default defaults.json --immediately-use
  tsconf-load app.config.ts --default defaults.json \\
      --type-identifier AppConfig --type-path src/config-types.ts
""",
    )

    parser.add_argument(
        "config",
        help="Path to the config file. A relative path is resolved against the "
        "current working directory.",
    )

    parser.add_argument(
        "--version", "-v", action="version", version=f"tsconf {get_version()}"
    )

    parser.add_argument(
        "--schema", help="Pydantic model to validate against, as 'module:ClassName'"
    )

    # Add creation arguments
    parser.add_argument(
        "--default",
        help="JSON file holding the default config, written if the file is missing",
    )
    parser.add_argument(
        "--immediately-use",
        action="store_true",
        help="Use the default config right away instead of halting for review",
    )
    parser.add_argument(
        "--type-identifier", help="Type to annotate the generated config with"
    )

    group = parser.add_mutually_exclusive_group()
    group.add_argument("--type-package", help="Package providing the type")
    group.add_argument("--type-path", help="File providing the type")

    parser.add_argument(
        "--verbose", action="store_true", help="Show debug messages on stderr"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else logging.INFO,
    )

    try:
        creation_request = build_creation_request(
            args.default,
            args.immediately_use,
            args.type_identifier,
            args.type_package,
            args.type_path,
        )
        schema = import_schema(args.schema) if args.schema else None
    except (OSError, ValueError, ImportError, AttributeError) as err:
        parser.error(str(err))

    try:
        output = asyncio.run(main(args.config, schema, creation_request))
    except ConfigLoadError as err:
        print(f"error [{err.cause.value}]: {err}", file=sys.stderr)
        return 1

    print(output)

    return 0


def get_version():
    """Get the tsconf version."""
    from tsconf.version import __version__

    return __version__


if __name__ == "__main__":
    sys.exit(cli())
