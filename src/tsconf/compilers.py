"""Compiler capabilities that turn config sources into loadable Python code.

A compiler receives the path of a config source the host cannot interpret
and returns the text of a Python module whose public globals are the exports
of that source. The text is written to a scratch file and executed by the
module loader (see :mod:`tsconf.fallback`).

Available compilers
-------------------
EsbuildCompiler
    TypeScript/JavaScript sources. The source is bundled with `esbuild` (local
    relative imports are inlined), evaluated with `node`, and the resulting
    export namespace is serialized into the generated module.
YamlCompiler
    YAML documents, parsed with PyYAML. The document becomes the `default`
    export.
JsonCompiler
    JSON documents. The document becomes the `default` export.
"""

import asyncio
import base64
import json
import os
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .api import (
    DEFAULT_COMPILER_TIMEOUT,
    DEFAULT_ESBUILD,
    DEFAULT_EXPORT,
    DEFAULT_NODE,
    ENV_COMPILER_TIMEOUT,
    ENV_ESBUILD,
    ENV_NODE,
    JSON_SUFFIXES,
    SCRIPT_SUFFIXES,
    YAML_SUFFIXES,
)
from .errors import CompilerError, ConfigLoadError, ErrorCause
from .utils.logger import logger

__all__ = [
    "Compiler",
    "EsbuildCompiler",
    "YamlCompiler",
    "JsonCompiler",
    "get_compiler",
    "render_bindings_module",
]

# Marks the start of the serialized exports in the node output, so that
# anything the config module prints itself is ignored
EXPORTS_MARKER = "__TSCONF_EXPORTS__"

# Evaluates a bundle passed as a data URL and dumps its export namespace
NODE_EVAL_SCRIPT = (
    'const mod = await import("data:text/javascript;base64,{bundle}");\n'
    "const exports = Object.fromEntries(Object.entries(mod));\n"
    'process.stdout.write("\\n{marker}" + JSON.stringify(exports));\n'
)


def render_bindings_module(bindings: Dict[str, Any], source: str) -> str:
    """Render a Python module that binds a set of JSON-compatible exports.

    Export names are not required to be valid Python identifiers, so they are
    injected through the module globals rather than assigned one by one.

    Parameters
    ----------
    bindings : Dict[str, Any]
        Export name to value mapping
    source : str
        Path of the compiled config source (recorded in the header)

    Returns
    -------
    str
        Python module text
    """
    payload = json.dumps(bindings, ensure_ascii=False, default=str)
    return (
        f"# Generated by tsconf from {source}\n"
        "import json as _json\n"
        "\n"
        f"globals().update(_json.loads({payload!r}))\n"
    )


def get_compiler_timeout() -> float:
    """Get the timeout applied to each external compiler process.

    Can be overridden with the TSCONF_COMPILER_TIMEOUT environment variable.

    Returns
    -------
    float
        Timeout in seconds
    """
    value = os.environ.get(ENV_COMPILER_TIMEOUT)
    if value:
        return float(value)

    return DEFAULT_COMPILER_TIMEOUT


class Compiler:
    """Capability that translates a config source into Python module code."""

    #: Suffixes this compiler understands
    suffixes = frozenset()

    async def compile(self, path: str) -> Optional[str]:
        """Translate a config source.

        Parameters
        ----------
        path : str
            Absolute path to the config source

        Returns
        -------
        str, optional
            Python module text, or `None` if no output could be produced
        """
        raise NotImplementedError

    def supports(self, path: Union[str, os.PathLike]) -> bool:
        """Check whether this compiler handles a given file."""
        return Path(path).suffix.lower() in self.suffixes


class EsbuildCompiler(Compiler):
    """Compile TypeScript/JavaScript config sources with esbuild and node.

    Parameters
    ----------
    esbuild : str, optional
        esbuild executable (default: $TSCONF_ESBUILD or `esbuild`)
    node : str, optional
        node executable (default: $TSCONF_NODE or `node`)
    timeout : float, optional
        Timeout per subprocess, in seconds
    """

    suffixes = frozenset(SCRIPT_SUFFIXES)

    def __init__(
        self,
        esbuild: Optional[str] = None,
        node: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.esbuild = esbuild or os.environ.get(ENV_ESBUILD, DEFAULT_ESBUILD)
        self.node = node or os.environ.get(ENV_NODE, DEFAULT_NODE)
        self.timeout = timeout if timeout is not None else get_compiler_timeout()

    def _run(self, tool: str, args: List[str], path: str, stdin: Optional[str] = None) -> str:
        """Run an external tool and return its standard output.

        Raises
        ------
        ConfigLoadError
            With cause `transpile_failed` if the tool cannot be started
        CompilerError
            If the tool exits with a non-zero status
        """
        try:
            result = subprocess.run(
                args,
                input=stdin,
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise ConfigLoadError(
                f"Could not transpile the config file: '{args[0]}' executable not "
                "found. Install it or point the matching TSCONF_* variable to it.",
                cause=ErrorCause.TRANSPILE_FAILED,
                reason="compiler_unavailable",
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise ConfigLoadError(
                f"Could not transpile the config file: {tool} timed out after "
                f"{self.timeout}s.",
                cause=ErrorCause.TRANSPILE_FAILED,
                reason="compiler_timeout",
            ) from exc

        if result.returncode != 0:
            raise CompilerError(path, result.stderr, tool=tool)

        return result.stdout

    def bundle(self, path: str) -> str:
        """Bundle a source file into a single ES module."""
        args = [
            self.esbuild,
            path,
            "--bundle",
            "--format=esm",
            "--platform=node",
            "--target=esnext",
            "--log-level=error",
        ]
        return self._run("esbuild", args, path)

    def evaluate(self, bundle: str, path: str) -> Dict[str, Any]:
        """Evaluate a bundle with node and return its export namespace."""
        encoded = base64.b64encode(bundle.encode("utf-8")).decode("ascii")
        script = NODE_EVAL_SCRIPT.format(bundle=encoded, marker=EXPORTS_MARKER)
        output = self._run("node", [self.node, "--input-type=module"], path, script)

        _, found, payload = output.rpartition(EXPORTS_MARKER)
        if not found:
            raise CompilerError(path, "node did not report the module exports", "node")

        return json.loads(payload)

    def _compile(self, path: str) -> Optional[str]:
        bundle = self.bundle(path)
        if not bundle.strip():
            return None

        bindings = self.evaluate(bundle, path)
        return render_bindings_module(bindings, path)

    async def compile(self, path: str) -> Optional[str]:
        logger.debug("Compiling %s with %s", path, self.esbuild)
        return await asyncio.to_thread(self._compile, path)


class YamlCompiler(Compiler):
    """Compile YAML documents into a module with a `default` export."""

    suffixes = frozenset(YAML_SUFFIXES)

    def _parse(self, path: str) -> Any:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)

    def _compile(self, path: str) -> str:
        document = self._parse(path)
        bindings = {} if document is None else {DEFAULT_EXPORT: document}
        return render_bindings_module(bindings, path)

    async def compile(self, path: str) -> Optional[str]:
        return await asyncio.to_thread(self._compile, path)


class JsonCompiler(YamlCompiler):
    """Compile JSON documents into a module with a `default` export."""

    suffixes = frozenset(JSON_SUFFIXES)

    def _parse(self, path: str) -> Any:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()

        return json.loads(text) if text.strip() else None


def get_compiler(path: Union[str, os.PathLike]) -> Optional[Compiler]:
    """Pick the compiler able to handle a config source.

    Parameters
    ----------
    path : Union[str, os.PathLike]
        Path to the config source

    Returns
    -------
    Compiler, optional
        Compiler for the file suffix, `None` if there is none
    """
    for compiler_cls in (EsbuildCompiler, YamlCompiler, JsonCompiler):
        if Path(path).suffix.lower() in compiler_cls.suffixes:
            return compiler_cls()

    return None
