import pytest

from edgeapp.config import AppCustomConfig, ConfigValidationError, HostInfo, ServiceConfig


def test_validate_accepts_complete_config():
    config = AppCustomConfig(some_value=987, some_service=HostInfo(host="SomeHost"))
    config.validate()
    assert config.some_value == 987


@pytest.mark.parametrize("value", [0, -1])
def test_validate_rejects_non_positive_value(value):
    config = AppCustomConfig(some_value=value, some_service=HostInfo(host="SomeHost"))
    with pytest.raises(ConfigValidationError, match="SomeValue must be greater than zero"):
        config.validate()


def test_validate_rejects_unset_service():
    config = AppCustomConfig(some_value=987)
    with pytest.raises(ConfigValidationError, match="SomeService is not set"):
        config.validate()


def test_validation_error_is_value_error():
    with pytest.raises(ValueError):
        AppCustomConfig().validate()


def test_update_from_raw_copies_configuration():
    target = ServiceConfig()
    source = ServiceConfig(
        AppCustomConfig(resource_names="A,B", some_value=987, some_service=HostInfo(host="SomeHost"))
    )
    assert target.update_from_raw(source) is True
    assert target == source


def test_update_from_raw_rejects_other_types():
    target = ServiceConfig()
    assert target.update_from_raw({"AppCustom": {}}) is False
    assert target == ServiceConfig()