"""Application service entry point wiring configuration, pipelines and routes."""

from __future__ import annotations

import argparse
import copy
import logging
from http import HTTPStatus
from typing import Any, Callable

from edgeapp.config import AppCustomConfig, ServiceConfig
from edgeapp.sample import Event, PipelineError, Sample

SERVICE_KEY = "app-new-service"

_log = logging.getLogger(__name__)


def _filter_by_device_name(device_names: list[str]) -> Callable[[Any, Any], tuple[bool, Any]]:
    """Pipeline function passing on only events from the given devices."""
    names = set(device_names)

    def filter_by_device_name(ctx: Any, data: Any) -> tuple[bool, Any]:
        if data is None:
            return False, PipelineError("FilterByDeviceName: No Data Received")
        if not isinstance(data, Event):
            return False, PipelineError("FilterByDeviceName: type received is not an Event")
        if not names or data.device_name in names:
            return True, data
        return False, None

    return filter_by_device_name


class App:
    """The application service: sets up and runs the pipelines."""

    def __init__(self) -> None:
        self.service: Any = None
        self.logger: logging.Logger = _log
        self.app_context: Any = None
        self.service_config: ServiceConfig | None = None

    def create_and_run_app_service(
        self, service_key: str, new_service_factory: Callable[[str], Any]
    ) -> int:
        """Create the service, configure it and run it; return the exit code."""
        self.service = new_service_factory(service_key)
        if self.service is None:
            return -1
        self.logger = self.service.logger
        lc = self.logger

        try:
            device_names = self.service.get_app_setting_strings("DeviceNames")
        except Exception as err:
            lc.error("failed to retrieve DeviceNames from configuration: %s", err)
            return -1

        self.service_config = ServiceConfig()
        try:
            self.service.load_custom_config(self.service_config, "AppCustom")
        except Exception as err:
            lc.error("failed load custom configuration: %s", err)
            return -1

        try:
            self.service_config.app_custom.validate()
        except Exception as err:
            lc.error("custom configuration failed validation: %s", err)
            return -1

        try:
            self.service.listen_for_custom_config_changes(
                self.service_config.app_custom, "AppCustom", self.process_config_updates
            )
        except Exception as err:
            lc.error("unable to watch custom writable configuration: %s", err)
            return -1

        sample = Sample()
        try:
            self.service.set_default_functions_pipeline(
                _filter_by_device_name(device_names),
                sample.log_event_details,
                sample.convert_event_to_xml,
                sample.output_xml,
            )
        except Exception as err:
            lc.error("SetFunctionsPipeline returned error: %s", err)
            return -1

        topic_pipelines = [
            (
                "Floats",
                ["events/device/device-virtual/+/Random-Float-Device/#"],
                (sample.log_event_details, sample.convert_event_to_xml, sample.output_xml),
            ),
            (
                "Int32s",
                ["events/device/device-virtual/+/+/Int32"],
                (
                    sample.log_event_details,
                    sample.send_get_command,
                    sample.convert_event_to_xml,
                    sample.output_xml,
                ),
            ),
        ]
        for pipeline_id, topics, functions in topic_pipelines:
            try:
                self.service.add_functions_pipeline_for_topics(pipeline_id, topics, *functions)
            except Exception as err:
                lc.error("AddFunctionsPipelineForTopic returned error: %s", err)
                return -1

        self.app_context = self.service.app_context

        try:
            self.service.add_custom_route("/api/v4/hello", True, self.hello_handler, "GET")
        except Exception as err:
            lc.error("AddCustomRoute returned error: %s", err)
            return -1

        try:
            self.service.run()
        except Exception as err:
            lc.error("Run returned error: %s", err)
            return -1
        return 0

    def process_config_updates(self, raw_writable_config: Any) -> None:
        """Apply an updated writable configuration and log what changed."""
        lc = self.logger
        if not isinstance(raw_writable_config, AppCustomConfig):
            lc.error(
                "unable to process config updates: Can not cast raw config to type 'AppCustomConfig'"
            )
            return
        if self.service_config is None:
            self.service_config = ServiceConfig()

        previous = self.service_config.app_custom
        updated = copy.deepcopy(raw_writable_config)
        self.service_config.app_custom = updated

        if previous == updated:
            lc.info("No changes detected")
            return
        if previous.some_value != updated.some_value:
            lc.info("AppCustom.SomeValue changed to: %d", updated.some_value)
        if previous.resource_names != updated.resource_names:
            lc.info("AppCustom.ResourceNames changed to: %s", updated.resource_names)
        if previous.some_service != updated.some_service:
            lc.info("AppCustom.SomeService changed to: %s", updated.some_service)

    def hello_handler(self, request: Any) -> tuple[int, bytes]:
        """Answer the custom hello route."""
        return HTTPStatus.OK, b"hello"


def _no_runtime_factory(service_key: str) -> None:
    _log.error("no application service runtime is available for service '%s'", service_key)
    return None


def main(argv: list[str] | None = None) -> int:
    """Start the application service and return its exit code."""
    parser = argparse.ArgumentParser(prog="edgeapp")
    parser.add_argument("--service-key", default=SERVICE_KEY)
    args = parser.parse_args(argv)
    return App().create_and_run_app_service(args.service_key, _no_runtime_factory)


if __name__ == "__main__":
    raise SystemExit(main())