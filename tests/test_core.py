"""Unit tests for core infrastructure components."""
import threading

import pytest
from unittest.mock import Mock

from core.container import Container
from core.error_handler import as_result, handle_exceptions, log_execution_time
from core.exceptions import InitializationError, PropertiesParseError, TypeCoercionError
from core.result import Failure, Success, partition


class TestContainer:
    """Tests for dependency injection container."""

    def test_register_and_get_singleton(self):
        # Arrange
        container = Container()
        instance = {"name": "test"}

        # Act
        container.register_singleton("service", instance)

        # Assert
        assert container.get("service") is instance

    def test_register_and_get_service(self):
        container = Container()
        instance = Mock()

        container.register("mock_service", instance)

        assert container.get("mock_service") is instance

    def test_factory_receives_container_and_is_cached(self):
        # Arrange
        container = Container()
        container.register_singleton("dependency", "dep")
        factory = Mock(side_effect=lambda c: ("built", c.get("dependency")))

        # Act
        container.register_factory("factory_service", factory)
        result1 = container.get("factory_service")
        result2 = container.get("factory_service")

        # Assert
        factory.assert_called_once_with(container)
        assert result1 == ("built", "dep")
        assert result1 is result2

    def test_factory_runs_once_under_concurrency(self):
        container = Container()
        created = []

        def factory(_):
            created.append(object())
            return created[-1]

        container.register_factory("shared", factory)
        results = []
        threads = [threading.Thread(target=lambda: results.append(container.get("shared"))) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(created) == 1
        assert all(r is created[0] for r in results)

    def test_instances_only_lists_built_services(self):
        container = Container()
        container.register_factory("lazy", lambda _: "value")
        container.register("eager", "e")

        assert container.instances() == {"eager": "e"}
        container.get("lazy")
        assert container.instances() == {"eager": "e", "lazy": "value"}

    def test_has_service(self):
        container = Container()
        container.register("existing", Mock())

        assert container.has("existing")
        assert not container.has("non_existing")

    def test_get_nonexistent_raises_error(self):
        with pytest.raises(KeyError):
            Container().get("nonexistent")

    def test_clear(self):
        container = Container()
        container.register("service1", Mock())
        container.register_singleton("service2", Mock())

        container.clear()

        assert not container.has("service1")
        assert not container.has("service2")


class TestResult:
    """Tests for Result type."""

    def test_success(self):
        result = Success(42)

        assert result.is_success()
        assert not result.is_failure()
        assert result.unwrap() == 42

    def test_failure(self):
        error = ValueError("test error")
        result = Failure(error)

        assert result.is_failure()
        assert not result.is_success()
        with pytest.raises(ValueError):
            result.unwrap()

    def test_partition(self):
        error = ValueError("bad")

        values, errors = partition([Success(1), Failure(error), Success(2)])

        assert values == [1, 2]
        assert errors == [error]


class TestErrorHandler:
    """Tests for error handling decorators."""

    def test_as_result_captures_listed_exceptions(self):
        @as_result(OSError)
        def read():
            raise FileNotFoundError("gone")

        result = read()

        assert result.is_failure()
        assert isinstance(result.error, FileNotFoundError)

    def test_as_result_lets_other_exceptions_propagate(self):
        @as_result(OSError)
        def broken():
            raise RuntimeError("bug")

        with pytest.raises(RuntimeError):
            broken()

    def test_as_result_success(self):
        @as_result()
        def ok():
            return "value"

        assert ok().unwrap() == "value"

    def test_handle_exceptions_returns_default(self):
        @handle_exceptions(default_return="fallback")
        def failing():
            raise ValueError("boom")

        assert failing() == "fallback"

    def test_handle_exceptions_reraise(self):
        @handle_exceptions(reraise=True)
        def failing():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            failing()

    def test_log_execution_time_preserves_result(self):
        logger_instance = Mock()

        @log_execution_time(logger_instance=logger_instance)
        def compute():
            return 5

        assert compute() == 5
        logger_instance.log.assert_called_once()
        assert logger_instance.log.call_args[0][0] == "DEBUG"


class TestExceptions:
    def test_initialization_error_lists_failures(self):
        failures = [PropertiesParseError("bad escape", "a.properties", 3), FileNotFoundError("b.properties")]

        error = InitializationError("2 file(s) failed", failures)

        assert error.failures == failures
        assert "a.properties:3" in str(error)

    def test_type_coercion_error_message(self):
        error = TypeCoercionError("timeout", "soon", "integer")

        assert "timeout" in str(error) and "integer" in str(error)
