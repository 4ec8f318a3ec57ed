"""Sets up fixtures general to the entire test suite of this package.

The compile fallback is exercised with fake compilers so that no test needs
esbuild or node to be installed.
"""

import json
import re
from pathlib import Path

import pytest

from tsconf.compilers import Compiler, render_bindings_module
from tsconf.native import ImportlibModuleLoader

# Matches `export default <json>;` and `export const <name>[:<Type>] = <json>;`
EXPORT_PATTERN = re.compile(
    r"export\s+(?:default\s+|const\s+(?P<name>\w+)\s*(?::\s*\w+)?\s*=\s*)"
    r"(?P<value>.*?);\s*(?=export|\Z)",
    re.S,
)


class LiteralScriptCompiler(Compiler):
    """Fake compiler for TypeScript sources whose exports are JSON literals."""

    suffixes = frozenset({".ts", ".mts", ".js"})

    def __init__(self):
        self.calls = []

    async def compile(self, path):
        self.calls.append(path)
        text = Path(path).read_text(encoding="utf-8")
        if not text.strip():
            return None

        bindings = {}
        for match in EXPORT_PATTERN.finditer(text):
            name = match.group("name") or "default"
            bindings[name] = json.loads(match.group("value"))

        return render_bindings_module(bindings, path)


class StaticCompiler(Compiler):
    """Fake compiler returning a fixed piece of Python code."""

    suffixes = frozenset({".ts"})

    def __init__(self, code):
        self.code = code
        self.calls = []

    async def compile(self, path):
        self.calls.append(path)
        return self.code


class RecordingLoader(ImportlibModuleLoader):
    """Importlib loader remembering which files it executed."""

    def __init__(self):
        self.paths = []
        self.existed = []

    def load(self, path):
        self.paths.append(path)
        self.existed.append(Path(path).exists())
        return super().load(path)


@pytest.fixture(name="script_compiler")
def fixture_script_compiler():
    """Fake TypeScript compiler understanding JSON literal exports."""
    return LiteralScriptCompiler()


@pytest.fixture(name="static_compiler")
def fixture_static_compiler():
    """Factory of fake compilers returning fixed code."""
    return StaticCompiler


@pytest.fixture(name="recording_loader")
def fixture_recording_loader():
    """Module loader recording the files it executes."""
    return RecordingLoader()


@pytest.fixture(name="scratch_dir")
def fixture_scratch_dir(tmp_path):
    """Empty directory used for compiled scratch modules.

    Parameters
    ----------
    tmp_path : str
       Generic pytest fixture used to handle temporary test files
    """
    scratch_dir = tmp_path / "scratch"
    scratch_dir.mkdir()

    return scratch_dir


@pytest.fixture(name="write_config")
def fixture_write_config(tmp_path):
    """Helper writing a config source into a dedicated directory."""
    config_dir = tmp_path / "configs"
    config_dir.mkdir()

    def write(file_name, content):
        path = config_dir / file_name
        path.write_text(content, encoding="utf-8")
        return str(path)

    return write
