"""Unit tests for use cases."""
from unittest.mock import Mock

from app.use_cases import (
    GetSitePropertyUseCase,
    GetUserConfigurationUseCase,
    PropertyValue,
    ReloadSiteConfigurationUseCase,
    SetSitePropertyUseCase,
    SetUserConfigurationUseCase,
)
from core.exceptions import (
    InitializationError,
    ResolutionError,
    SiteConfigurationException,
    TypeCoercionError,
    UserConfigurationError,
    WriteError,
)


class TestReloadSiteConfigurationUseCase:
    def test_successful_reload(self):
        # Arrange
        site = Mock()
        site.update.return_value = {"timeout": "90"}
        use_case = ReloadSiteConfigurationUseCase(site)

        # Act
        result = use_case.execute(root="/etc/app", locations=["base"])

        # Assert
        assert result.is_success()
        assert result.unwrap() == {"timeout": "90"}
        site.update.assert_called_once_with(root="/etc/app", locations=["base"])

    def test_reload_failure(self):
        site = Mock()
        site.update.side_effect = InitializationError("broken file")
        use_case = ReloadSiteConfigurationUseCase(site)

        result = use_case.execute()

        assert result.is_failure()
        assert isinstance(result.error, InitializationError)


class TestGetSitePropertyUseCase:
    def test_string_property(self):
        site = Mock()
        site.get_property.return_value = "90"
        use_case = GetSitePropertyUseCase(site)

        result = use_case.execute("timeout")

        assert result.unwrap() == PropertyValue("timeout", "90", "str")

    def test_typed_property(self):
        site = Mock()
        site.get_int.return_value = 90
        use_case = GetSitePropertyUseCase(site)

        result = use_case.execute("timeout", "int")

        assert result.unwrap().value == 90
        site.get_int.assert_called_once_with("timeout")

    def test_bool_uses_default(self):
        site = Mock()
        site.get_bool.return_value = True
        use_case = GetSitePropertyUseCase(site)

        result = use_case.execute("enabled", "bool", default=True)

        assert result.unwrap().value is True
        site.get_bool.assert_called_once_with("enabled", True)

    def test_absent_property_is_success_not_found(self):
        site = Mock()
        site.get_property.return_value = None
        use_case = GetSitePropertyUseCase(site)

        result = use_case.execute("missing")

        assert result.is_success()
        assert result.unwrap().found is False

    def test_coercion_failure(self):
        site = Mock()
        site.get_double.side_effect = TypeCoercionError("x", "abc", "double")
        use_case = GetSitePropertyUseCase(site)

        result = use_case.execute("x", "double")

        assert result.is_failure()
        assert isinstance(result.error, TypeCoercionError)

    def test_unsupported_type(self):
        use_case = GetSitePropertyUseCase(Mock())

        result = use_case.execute("x", "decimal")

        assert result.is_failure()
        assert isinstance(result.error, SiteConfigurationException)


class TestSetSitePropertyUseCase:
    def test_successful_write(self):
        site = Mock()
        use_case = SetSitePropertyUseCase(site)

        result = use_case.execute("admin", "timeout", "15")

        assert result.is_success()
        site.set_property.assert_called_once_with("admin", "timeout", "15")

    def test_listener_failure(self):
        site = Mock()
        site.set_property.side_effect = WriteError("listener failed")
        use_case = SetSitePropertyUseCase(site)

        result = use_case.execute("admin", "timeout", "15")

        assert result.is_failure()
        assert isinstance(result.error, WriteError)

    def test_resolution_failure(self):
        site = Mock()
        site.set_property.side_effect = ResolutionError("not initialized")
        use_case = SetSitePropertyUseCase(site)

        assert use_case.execute("admin", "timeout", "15").is_failure()


class TestUserConfigurationUseCases:
    def test_get(self):
        users = Mock()
        users.get_user_configuration.return_value = "dark"
        use_case = GetUserConfigurationUseCase(users)

        result = use_case.execute("alice", "theme", "ui")

        assert result.unwrap() == "dark"
        users.get_user_configuration.assert_called_once_with("alice", "theme", "ui")

    def test_set_failure(self):
        users = Mock()
        users.set_user_configuration.side_effect = UserConfigurationError("disk full")
        use_case = SetUserConfigurationUseCase(users)

        result = use_case.execute("alice", "theme", "dark")

        assert result.is_failure()
        assert isinstance(result.error, UserConfigurationError)
