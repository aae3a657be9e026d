"""Tests for Interlace error handling."""

from interlace.errors import (
    DiscoveryCancelledError,
    HandlerInvocationError,
    InterlaceError,
    ModuleLoadError,
    RegistrationShapeError,
)


class TestInterlaceError:
    """Test InterlaceError base class."""

    def test_basic_error_creation(self) -> None:
        """Test creating a basic InterlaceError."""
        error = InterlaceError(code="interlace:test/error", message="Test error message")

        assert error.code == "interlace:test/error"
        assert error.message == "Test error message"
        assert error.details == {}
        assert str(error) == "Test error message"

    def test_to_dict(self) -> None:
        """Test serializing an error with details."""
        error = InterlaceError(
            code="interlace:test/detailed", message="Detailed error", details={"value": 42}
        )

        assert error.to_dict() == {
            "code": "interlace:test/detailed",
            "message": "Detailed error",
            "details": {"value": 42},
        }


class TestRegistrationShapeError:
    """Test RegistrationShapeError."""

    def test_fields_and_message(self) -> None:
        error = RegistrationShapeError("SketchDocument", "on_click", "handler must be callable")

        assert isinstance(error, InterlaceError)
        assert error.code == "interlace:registry/invalid_shape"
        assert error.message == (
            "SketchDocument.on_click is not a valid handler: handler must be callable"
        )
        assert error.details == {
            "owner": "SketchDocument",
            "handler_name": "on_click",
            "rule": "handler must be callable",
        }

    def test_extra_details_are_merged(self) -> None:
        error = RegistrationShapeError("A", "b", "rule", details={"channel": "/menu"})
        assert error.details["channel"] == "/menu"
        assert error.details["rule"] == "rule"


class TestHandlerInvocationError:
    """Test HandlerInvocationError."""

    def test_fields_and_message(self) -> None:
        error = HandlerInvocationError(
            handler_name="SketchDocument.on_click",
            channel="/menu",
            candidate_type="Click",
            reason="RuntimeError: boom",
        )

        assert error.code == "interlace:dispatch/handler_failed"
        assert "SketchDocument.on_click failed on Click (channel /menu)" in error.message
        assert error.to_dict()["details"]["reason"] == "RuntimeError: boom"


class TestDiscoveryCancelledError:
    """Test DiscoveryCancelledError."""

    def test_fields(self) -> None:
        error = DiscoveryCancelledError("/menu")

        assert error.code == "interlace:dispatch/cancelled"
        assert error.channel == "/menu"
        assert error.details == {"channel": "/menu"}


class TestModuleLoadError:
    """Test ModuleLoadError."""

    def test_fields(self) -> None:
        error = ModuleLoadError("app:engine", "import failed")

        assert error.code == "interlace:cli/module_load"
        assert error.message == "Cannot load 'app:engine': import failed"
        assert error.target == "app:engine"
        assert error.reason == "import failed"
