"""Sample pipeline functions operating on events."""

from __future__ import annotations

import base64
import logging
import time
import uuid
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any

EVENTS_CONVERTED_TO_XML_NAME = "EventsConvertedToXML"
API_VERSION = "v3"
CONTENT_TYPE_XML = "application/xml"

VALUE_TYPE_BINARY = "Binary"

_INT_RANGES = {
    "Int8": (-(2**7), 2**7 - 1),
    "Int16": (-(2**15), 2**15 - 1),
    "Int32": (-(2**31), 2**31 - 1),
    "Int64": (-(2**63), 2**63 - 1),
    "Uint8": (0, 2**8 - 1),
    "Uint16": (0, 2**16 - 1),
    "Uint32": (0, 2**32 - 1),
    "Uint64": (0, 2**64 - 1),
}
_FLOAT_TYPES = {"Float32", "Float64"}


class PipelineError(Exception):
    """Error handed down a pipeline by a function that stopped it."""


@dataclass
class Reading:
    """A single reading carried by an event."""

    resource_name: str
    value_type: str
    device_name: str = ""
    profile_name: str = ""
    value: str = ""
    binary_value: bytes = b""
    media_type: str = ""
    units: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    origin: int = field(default_factory=time.time_ns)


@dataclass
class Event:
    """An event produced by a device, holding its readings."""

    profile_name: str
    device_name: str
    source_name: str
    readings: list[Reading] = field(default_factory=list)
    tags: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    origin: int = field(default_factory=time.time_ns)
    api_version: str = API_VERSION

    def add_simple_reading(self, resource_name: str, value_type: str, value: Any) -> None:
        """Append a reading whose value is checked against ``value_type``."""
        self.readings.append(
            Reading(
                resource_name=resource_name,
                value_type=value_type,
                device_name=self.device_name,
                profile_name=self.profile_name,
                value=_format_simple_value(value_type, value),
                origin=self.origin,
            )
        )

    def to_xml(self) -> str:
        """Render the event as an XML document."""
        root = ET.Element("Event")
        for tag, text in (
            ("ApiVersion", self.api_version),
            ("Id", self.id),
            ("DeviceName", self.device_name),
            ("ProfileName", self.profile_name),
            ("SourceName", self.source_name),
            ("Origin", str(self.origin)),
        ):
            ET.SubElement(root, tag).text = text
        readings = ET.SubElement(root, "Readings")
        for reading in self.readings:
            element = ET.SubElement(readings, "Reading")
            for tag, text in (
                ("Id", reading.id),
                ("Origin", str(reading.origin)),
                ("DeviceName", reading.device_name),
                ("ResourceName", reading.resource_name),
                ("ProfileName", reading.profile_name),
                ("ValueType", reading.value_type),
                ("Units", reading.units),
            ):
                ET.SubElement(element, tag).text = text
            if reading.value_type.lower() == VALUE_TYPE_BINARY.lower():
                ET.SubElement(element, "BinaryValue").text = base64.b64encode(
                    reading.binary_value
                ).decode("ascii")
                ET.SubElement(element, "MediaType").text = reading.media_type
            else:
                ET.SubElement(element, "Value").text = reading.value
        tags = ET.SubElement(root, "Tags")
        for name, value in self.tags.items():
            ET.SubElement(tags, "Tag", name=str(name)).text = str(value)
        return ET.tostring(root, encoding="unicode")


def _format_simple_value(value_type: str, value: Any) -> str:
    if value_type == "Bool":
        if not isinstance(value, bool):
            raise ValueError(f"value type {value_type} requires a bool value")
        return "true" if value else "false"
    if value_type == "String":
        if not isinstance(value, str):
            raise ValueError(f"value type {value_type} requires a str value")
        return value
    if value_type in _INT_RANGES:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"value type {value_type} requires an int value")
        low, high = _INT_RANGES[value_type]
        if not low <= value <= high:
            raise ValueError(f"value {value} out of range for {value_type}")
        return str(value)
    if value_type in _FLOAT_TYPES:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"value type {value_type} requires a numeric value")
        return repr(float(value))
    raise ValueError(f"value type {value_type} is not a simple value type")


@dataclass
class CoreCommand:
    """A command a device offers through the command service."""

    name: str
    get: bool = False
    set: bool = False
    path: str = ""
    url: str = ""
    parameters: list[dict[str, str]] = field(default_factory=list)


class Counter:
    """Monotonic counter metric."""

    def __init__(self) -> None:
        self.count = 0

    def inc(self, amount: int = 1) -> None:
        self.count += amount


class Sample:
    """Example pipeline functions.

    Each function takes the pipeline context and the data from the previous
    function and returns ``(continue_pipeline, result)``.
    """

    def __init__(self) -> None:
        self.events_converted_to_xml: Counter | None = None

    def log_event_details(self, ctx: Any, data: Any) -> tuple[bool, Any]:
        """Log the event and its readings, passing the event on unchanged."""
        lc: logging.Logger = ctx.logger
        pipeline = ctx.pipeline_id
        lc.debug("LogEventDetails called in pipeline '%s'", pipeline)

        if data is None:
            return False, PipelineError(
                f"function LogEventDetails in pipeline '{pipeline}': No Data Received"
            )
        if not isinstance(data, Event):
            return False, PipelineError(
                f"function LogEventDetails in pipeline '{pipeline}', type received is not an Event"
            )

        event = data
        lc.info(
            "Event received in pipeline '%s': ID=%s, Device=%s, and ReadingCount=%d",
            pipeline, event.id, event.device_name, len(event.readings),
        )
        for number, reading in enumerate(event.readings, start=1):
            if reading.value_type.lower() == VALUE_TYPE_BINARY.lower():
                lc.info(
                    "Reading #%d received in pipeline '%s' with ID=%s, Resource=%s, "
                    "ValueType=%s, MediaType=%s and BinaryValue of size=`%d`",
                    number, pipeline, reading.id, reading.resource_name,
                    reading.value_type, reading.media_type, len(reading.binary_value),
                )
            else:
                lc.info(
                    "Reading #%d received in pipeline '%s' with ID=%s, Resource=%s, "
                    "ValueType=%s, Value=`%s`",
                    number, pipeline, reading.id, reading.resource_name,
                    reading.value_type, reading.value,
                )
        return True, event

    def send_get_command(self, ctx: Any, data: Any) -> tuple[bool, Any]:
        """Issue the first available GET command for the event's device."""
        lc: logging.Logger = ctx.logger
        pipeline = ctx.pipeline_id
        lc.debug("SendGetCommand function called in pipeline '%s'", pipeline)

        if data is None:
            return False, PipelineError(
                f"function SendGetCommand in pipeline '{pipeline}': No Data Received"
            )
        if not isinstance(data, Event):
            return False, PipelineError(
                f"function SendGetCommand in pipeline '{pipeline}', type received is not an Event"
            )

        device = data.device_name
        lc.debug("Issuing Command Query for device %s in pipeline '%s'", device, pipeline)
        client = ctx.command_client
        try:
            commands = list(client.device_core_commands_by_device_name(device))
        except Exception as err:
            return False, PipelineError(
                f"failed to get list of commands for {device} device: {err} in pipeline '{pipeline}'"
            )

        lc.debug(
            "Device %s has %d commands to choose from. (in pipeline '%s')",
            device, len(commands), pipeline,
        )
        command_name = next((command.name for command in commands if command.get), "")
        if not command_name:
            return False, PipelineError(
                f"failed to find a GET command for {device} device in pipeline '{pipeline}'"
            )

        lc.debug("Issuing Command %s for device %s in pipeline '%s'", command_name, device, pipeline)
        try:
            new_event = client.issue_get_command_by_name(
                device, command_name, push_event=False, return_event=True
            )
        except Exception as err:
            return False, PipelineError(
                f"failed to get Event for commandName {command_name} on {device} device: "
                f"{err} in pipeline '{pipeline}'"
            )

        lc.debug(
            "SendGetCommand successfully received new event from GET command %s on %s device "
            "in pipeline '%s'",
            command_name, device, pipeline,
        )
        lc.debug("Event returned is %r", new_event)
        return True, new_event

    def convert_event_to_xml(self, ctx: Any, data: Any) -> tuple[bool, Any]:
        """Convert the event to XML and count the conversion."""
        lc: logging.Logger = ctx.logger
        pipeline = ctx.pipeline_id
        lc.debug("ConvertEventToXML called in pipeline '%s'", pipeline)

        if data is None:
            return False, PipelineError(
                f"function ConvertEventToXML in pipeline '{pipeline}': No Data Received"
            )
        if not isinstance(data, Event):
            return False, PipelineError(
                f"function ConvertEventToXML in pipeline '{pipeline}': type received is not an Event"
            )
        try:
            xml = data.to_xml()
        except Exception:
            return False, PipelineError(
                f"function ConvertEventToXML in pipeline '{pipeline}': failed to convert event to XML"
            )

        lc.debug("Event converted to XML in pipeline '%s': %s", pipeline, xml)

        if self.events_converted_to_xml is None:
            self.events_converted_to_xml = Counter()
            manager = getattr(ctx, "metrics_manager", None)
            try:
                if manager is None:
                    raise RuntimeError("metrics manager not available")
                manager.register(EVENTS_CONVERTED_TO_XML_NAME, self.events_converted_to_xml, None)
            except Exception as err:
                lc.error(
                    "Unable to register metric %s. Collection will continue, "
                    "but metric will not be reported: %s",
                    EVENTS_CONVERTED_TO_XML_NAME, err,
                )
        self.events_converted_to_xml.inc(1)
        return True, xml

    def output_xml(self, ctx: Any, data: Any) -> tuple[bool, Any]:
        """Set the XML as the pipeline's response and end the pipeline."""
        lc: logging.Logger = ctx.logger
        pipeline = ctx.pipeline_id
        lc.debug("OutputXML called in pipeline '%s'", pipeline)

        if data is None:
            return False, PipelineError(
                f"function OutputXML in pipeline '{pipeline}': No Data Received"
            )
        if not isinstance(data, str):
            return False, PipelineError(
                f"function ConvertEventToXML in pipeline '{pipeline}': type received is not an string"
            )

        lc.debug("Outputting the following XML in pipeline '%s': %s", pipeline, data)
        ctx.set_response_data(data.encode())
        ctx.set_response_content_type(CONTENT_TYPE_XML)
        return False, None