import logging

import pytest

from edgeapp.app import App, main
from edgeapp.config import AppCustomConfig, HostInfo, ServiceConfig
from edgeapp.sample import Event


class FakeService:
    def __init__(self, fail=None, fill_config=True):
        self.fail = fail
        self.fill_config = fill_config
        self.logger = logging.getLogger("edgeapp.tests.service")
        self.app_context = object()
        self.calls = []
        self.pipelines = {}
        self.routes = []

    def _record(self, name):
        self.calls.append(name)
        if self.fail == name:
            raise RuntimeError("Failed")

    def get_app_setting_strings(self, name):
        self._record("get_app_setting_strings")
        return ["Random-Boolean-Device, Random-Integer-Device"]

    def load_custom_config(self, config, section):
        self._record("load_custom_config")
        if self.fill_config:
            config.app_custom.some_value = 987
            config.app_custom.some_service.host = "SomeHost"

    def listen_for_custom_config_changes(self, writable, section, callback):
        self._record("listen_for_custom_config_changes")

    def set_default_functions_pipeline(self, *functions):
        self._record("set_default_functions_pipeline")
        self.pipelines["default"] = functions

    def add_functions_pipeline_for_topics(self, pipeline_id, topics, *functions):
        self._record("add_functions_pipeline_for_topics")
        self.pipelines[pipeline_id] = functions

    def add_custom_route(self, route, authenticated, handler, *methods):
        self._record("add_custom_route")
        self.routes.append((route, authenticated, handler, methods))

    def run(self):
        self._record("run")


def test_create_and_run_service_success():
    service = FakeService()
    app = App()
    assert app.create_and_run_app_service("TestKey", lambda _: service) == 0
    assert service.calls[-1] == "run"
    assert len(service.pipelines["default"]) == 4
    assert len(service.pipelines["Floats"]) == 3
    assert len(service.pipelines["Int32s"]) == 4
    assert service.routes[0][0] == "/api/v4/hello"
    assert app.service_config.app_custom.some_value == 987


def test_create_and_run_service_new_service_failed():
    assert App().create_and_run_app_service("TestKey", lambda _: None) == -1


def test_create_and_run_service_get_app_setting_strings_failed():
    service = FakeService(fail="get_app_setting_strings")
    assert App().create_and_run_app_service("TestKey", lambda _: service) == -1
    assert "get_app_setting_strings" in service.calls
    assert "load_custom_config" not in service.calls


def test_create_and_run_service_set_functions_pipeline_failed():
    service = FakeService(fail="set_default_functions_pipeline")
    assert App().create_and_run_app_service("TestKey", lambda _: service) == -1
    assert "set_default_functions_pipeline" in service.calls
    assert "run" not in service.calls


def test_create_and_run_service_run_failed():
    service = FakeService(fail="run")
    assert App().create_and_run_app_service("TestKey", lambda _: service) == -1
    assert "run" in service.calls


def test_create_and_run_service_validation_failed():
    service = FakeService(fill_config=False)
    assert App().create_and_run_app_service("TestKey", lambda _: service) == -1
    assert "listen_for_custom_config_changes" not in service.calls


def test_default_pipeline_filters_device_names():
    service = FakeService()
    App().create_and_run_app_service("TestKey", lambda _: service)
    device_filter = service.pipelines["default"][0]
    other = Event("MyProfile", "MyDevice", "MySource")
    assert device_filter(None, other) == (False, None)
    wanted = Event("MyProfile", "Random-Boolean-Device, Random-Integer-Device", "MySource")
    assert device_filter(None, wanted) == (True, wanted)


def test_process_config_updates_applies_change(caplog):
    app = App()
    app.service_config = ServiceConfig()
    updated = AppCustomConfig(some_value=987, some_service=HostInfo(host="SomeHost"))
    with caplog.at_level(logging.INFO):
        app.process_config_updates(updated)
    assert app.service_config.app_custom == updated
    assert "AppCustom.SomeValue changed to: 987" in caplog.text


def test_process_config_updates_no_change(caplog):
    app = App()
    app.service_config = ServiceConfig(AppCustomConfig(some_value=987))
    with caplog.at_level(logging.INFO):
        app.process_config_updates(AppCustomConfig(some_value=987))
    assert "No changes detected" in caplog.text


def test_process_config_updates_wrong_type_keeps_config(caplog):
    app = App()
    app.service_config = ServiceConfig(AppCustomConfig(some_value=987))
    with caplog.at_level(logging.ERROR):
        app.process_config_updates({"SomeValue": 1})
    assert app.service_config.app_custom.some_value == 987
    assert "Can not cast raw config" in caplog.text


def test_hello_handler():
    assert App().hello_handler(None) == (200, b"hello")


def test_main_without_runtime_fails():
    assert main(["--service-key", "TestKey"]) == -1


@pytest.mark.parametrize("step", ["load_custom_config", "add_custom_route"])
def test_other_failures_return_minus_one(step):
    service = FakeService(fail=step)
    assert App().create_and_run_app_service("TestKey", lambda _: service) == -1
    assert service.calls[-1] == step