"""Tests for errors.py -- exception hierarchy."""

from media_reflink.errors import (
    ConfigError,
    ExternalToolError,
    LibraryError,
    PlatformError,
    ReflinkError,
    StateError,
)


class TestExceptionHierarchy:
    def test_all_inherit_from_reflink_error(self):
        for cls in (ConfigError, StateError, LibraryError, PlatformError, ExternalToolError):
            assert issubclass(cls, ReflinkError)

    def test_reflink_error_is_exception(self):
        assert issubclass(ReflinkError, Exception)


class TestExternalToolError:
    def test_attributes(self):
        err = ExternalToolError(tool="cp", exit_code=1, stderr="Invalid cross-device link")
        assert err.tool == "cp"
        assert err.exit_code == 1
        assert err.stderr == "Invalid cross-device link"
        assert "cp" in str(err)
        assert "Invalid cross-device link" in str(err)
        assert err.command == ["cp"]

    def test_command_in_message(self):
        err = ExternalToolError(
            "cp", 1, "Operation not supported",
            command=["cp", "--reflink=always", "/src/Show", "/lib/Show"],
        )
        assert err.command == ["cp", "--reflink=always", "/src/Show", "/lib/Show"]
        assert "`cp --reflink=always /src/Show /lib/Show` failed (1)" in str(err)

    def test_empty_stderr(self):
        err = ExternalToolError("cp", 2, "")
        assert str(err) == "`cp` failed (2): no error output"
