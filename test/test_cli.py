"""Tests for the command line entry point."""

import json
import os

import pytest

from tsconf.bin.cli import build_creation_request, cli, import_schema
from tsconf.models import LocalSource, PackageSource


@pytest.fixture(name="schema_module")
def fixture_schema_module(tmp_path, monkeypatch):
    """Importable module declaring a pydantic model."""
    module_dir = tmp_path / "modules"
    module_dir.mkdir()
    (module_dir / "tsconf_cli_schemas.py").write_text(
        "from pydantic import BaseModel\n"
        "\n"
        "class AppConfig(BaseModel):\n"
        "    port: int\n"
        "    host: str = 'localhost'\n"
    )
    monkeypatch.syspath_prepend(str(module_dir))

    return "tsconf_cli_schemas"


class TestCli:
    """Test suite for the `tsconf-load` command."""

    def test_load(self, write_config, capsys):
        """Test that the resolved config is printed as JSON."""
        path = write_config("config.py", "config = {'port': 8080}\n")

        assert cli([path]) == 0

        assert json.loads(capsys.readouterr().out) == {"port": 8080}

    def test_relative_path(self, write_config, monkeypatch, capsys):
        """Test that the path is resolved against the working directory."""
        path = write_config("config.json", '{"port": 8080}')
        monkeypatch.chdir(path.rsplit("/", 1)[0])

        assert cli(["config.json"]) == 0

        assert json.loads(capsys.readouterr().out) == {"port": 8080}

    def test_missing_file(self, tmp_path, capsys):
        """Test that a load error is reported with its cause."""
        assert cli([str(tmp_path / "app.config.ts")]) == 1

        err = capsys.readouterr().err
        assert "error [file_not_found]: File not found" in err

    def test_create(self, tmp_path, capsys):
        """Test that a default config can be written and used right away."""
        default = tmp_path / "defaults.json"
        default.write_text(json.dumps({"port": 8080}))
        target = tmp_path / "app.config.ts"

        code = cli([str(target), "--default", str(default), "--immediately-use"])

        assert code == 0
        assert json.loads(capsys.readouterr().out) == {"port": 8080}
        assert target.is_file()

    def test_halt(self, tmp_path, capsys):
        """Test that a new file halts for review by default."""
        default = tmp_path / "defaults.json"
        default.write_text(json.dumps({"port": 8080}))
        target = tmp_path / "app.config.ts"

        assert cli([str(target), "--default", str(default)]) == 1

        assert "error [halt_and_check]" in capsys.readouterr().err
        assert target.is_file()

    def test_schema(self, write_config, schema_module, capsys):
        """Test that the config is validated against a model."""
        path = write_config("config.py", "config = {'port': 8080}\n")

        assert cli([path, "--schema", f"{schema_module}:AppConfig"]) == 0

        assert json.loads(capsys.readouterr().out) == {
            "port": 8080,
            "host": "localhost",
        }

    def test_schema_mismatch(self, write_config, schema_module, capsys):
        """Test that a validation failure is reported with its cause."""
        path = write_config("config.py", "config = {'host': 'example.org'}\n")

        assert cli([path, "--schema", f"{schema_module}:AppConfig"]) == 1

        err = capsys.readouterr().err
        assert "error [invalid_config_format]" in err
        assert "port: Field required" in err

    def test_bad_schema_reference(self, write_config):
        """Test that a malformed schema reference is a usage error."""
        path = write_config("config.py", "config = {}\n")

        with pytest.raises(SystemExit) as exc_info:
            cli([path, "--schema", "no_colon_here"])

        assert exc_info.value.code == 2

    def test_help_mentions_relative_paths(self, capsys):
        """Test that the resolution of relative paths is documented."""
        with pytest.raises(SystemExit) as exc_info:
            cli(["--help"])

        assert exc_info.value.code == 0
        help_text = " ".join(capsys.readouterr().out.split())
        assert "resolved against the current working directory" in help_text

    @pytest.mark.parametrize("content", [None, "{not json"])
    def test_bad_default_file(self, tmp_path, capsys, content):
        """Test that an unreadable default config is a usage error."""
        default = tmp_path / "defaults.json"
        if content is not None:
            default.write_text(content)

        with pytest.raises(SystemExit) as exc_info:
            cli([str(tmp_path / "app.config.ts"), "--default", str(default)])

        assert exc_info.value.code == 2
        assert "Traceback" not in capsys.readouterr().err
        assert not (tmp_path / "app.config.ts").exists()

    @pytest.mark.parametrize(
        "reference", ["tsconf_no_such_module:AppConfig", "tsconf.models:NoSuchModel"]
    )
    def test_unimportable_schema(self, write_config, reference):
        """Test that a schema that cannot be imported is a usage error."""
        path = write_config("config.py", "config = {}\n")

        with pytest.raises(SystemExit) as exc_info:
            cli([path, "--schema", reference])

        assert exc_info.value.code == 2

    def test_type_identifier_without_source(self, tmp_path):
        """Test that a type needs a place to import it from."""
        default = tmp_path / "defaults.json"
        default.write_text("{}")

        with pytest.raises(SystemExit) as exc_info:
            cli(
                [
                    str(tmp_path / "app.config.ts"),
                    "--default",
                    str(default),
                    "--type-identifier",
                    "AppConfig",
                ]
            )

        assert exc_info.value.code == 2


class TestHelpers:
    """Test suite for the argument conversion helpers."""

    def test_import_schema(self, schema_module):
        """Test that a model class is imported from its reference."""
        model = import_schema(f"{schema_module}:AppConfig")
        assert model.__name__ == "AppConfig"

    def test_no_default(self):
        """Test that no request is built without a default config."""
        assert build_creation_request(None, True, "AppConfig", "@acme/x", None) is None

    def test_package_type(self, tmp_path):
        """Test a request typed from a package."""
        default = tmp_path / "defaults.json"
        default.write_text('{"port": 1}')

        request = build_creation_request(
            str(default), False, "AppConfig", "@acme/types", None
        )

        assert request.default_config == {"port": 1}
        assert not request.immediately_use
        assert request.type_constraint.source == PackageSource("@acme/types")

    def test_local_type(self, tmp_path, monkeypatch):
        """Test that a local type path is made absolute."""
        monkeypatch.chdir(tmp_path)
        default = tmp_path / "defaults.json"
        default.write_text("{}")

        request = build_creation_request(
            str(default), True, "AppConfig", None, "types/app.ts"
        )

        assert request.type_constraint.source == LocalSource(
            os.path.join(os.getcwd(), "types", "app.ts")
        )
