"""Tests for the tagged error taxonomy."""

import pytest

from tsconf.errors import CompilerError, ConfigLoadError, ErrorCause, is_known_cause


class TestErrorCause:
    """Test suite for the closed set of error causes."""

    def test_tags(self):
        """Test that exactly the documented tags exist."""
        assert {cause.value for cause in ErrorCause} == {
            "file_not_found",
            "halt_and_check",
            "no_exports",
            "uncertain_export",
            "invalid_default_config_format",
            "invalid_config_format",
            "invalid_path",
            "transpile_failed",
        }

    def test_tags_compare_as_strings(self):
        """Test that causes can be compared with their plain tag."""
        assert ErrorCause.HALT_AND_CHECK == "halt_and_check"

    @pytest.mark.parametrize(
        "value", [ErrorCause.NO_EXPORTS, "transpile_failed", "invalid_path"]
    )
    def test_is_known_cause(self, value):
        """Test recognition of members and string tags."""
        assert is_known_cause(value)

    @pytest.mark.parametrize("value", ["Transpile_Failed", "oops", "", None, 3, {}])
    def test_is_not_known_cause(self, value):
        """Test that anything else is rejected."""
        assert not is_known_cause(value)

    def test_is_known_cause_error_instance(self):
        """Test that a raised load error counts as a known cause."""
        err = ConfigLoadError("missing", cause=ErrorCause.FILE_NOT_FOUND)
        assert is_known_cause(err)


class TestConfigLoadError:
    """Test suite for the error carried through the pipeline."""

    def test_attributes(self):
        """Test that the message, cause and reason are stored."""
        err = ConfigLoadError(
            "Path must be absolute", cause=ErrorCause.INVALID_PATH, reason="x"
        )

        assert str(err) == "Path must be absolute"
        assert err.cause is ErrorCause.INVALID_PATH
        assert err.reason == "x"

    def test_cause_from_tag(self):
        """Test that a plain tag is converted to its enum member."""
        err = ConfigLoadError("nothing", cause="no_exports")
        assert err.cause is ErrorCause.NO_EXPORTS
        assert err.reason is None

    def test_unknown_cause(self):
        """Test that a cause outside the taxonomy is refused."""
        with pytest.raises(ValueError):
            ConfigLoadError("bad", cause="not_a_cause")

    def test_repr(self):
        """Test that the representation shows the cause."""
        err = ConfigLoadError("halt", cause=ErrorCause.HALT_AND_CHECK)
        assert "halt_and_check" in repr(err)


def test_compiler_error_message():
    """Test that compiler diagnostics end up in the message."""
    err = CompilerError("/srv/app.config.ts", "  Expected ';' but found '}'\n", "esbuild")

    assert isinstance(err, RuntimeError)
    assert str(err) == "esbuild failed for /srv/app.config.ts:\nExpected ';' but found '}'"
    assert err.path == "/srv/app.config.ts"
    assert err.tool == "esbuild"
