# edgeapp

A small application-service template: pipeline functions that handle
device events, a typed custom configuration with validation, and a routine
that wires both into an application service object you supply.

It has no dependencies beyond the standard library.

## Install

```
pip install .
pip install ".[test]"   # with pytest
```

## Configuration (`edgeapp.config`)

- `HostInfo` – dataclass with `host`, `port` and `protocol`.
- `AppCustomConfig` – dataclass with `resource_names`, `some_value` and
  `some_service`. `validate()` raises `ConfigValidationError` (a
  `ValueError`) when `some_value` is not greater than zero, or when
  `some_service` equals an empty `HostInfo()`.
- `ServiceConfig` – wraps `app_custom`. `update_from_raw(raw_config)` takes
  over the `app_custom` of another `ServiceConfig` and returns `True`; given
  anything else it returns `False` and changes nothing.

## Events and pipeline functions (`edgeapp.sample`)

`Event` holds `profile_name`, `device_name`, `source_name`, a list of
`Reading` objects and a `tags` dict; `id` and `origin` (nanoseconds) are
generated. `add_simple_reading(resource_name, value_type, value)` appends a
reading after checking the value against the type (`Bool`, `String`,
`Int8`…`Int64`, `Uint8`…`Uint64`, `Float32`, `Float64`), raising
`ValueError` on a wrong type, an out-of-range integer or an unknown type.
`to_xml()` renders the event, its readings and tags as an `<Event>` XML
document.

```python
from edgeapp.sample import Event

event = Event(profile_name="MyProfile", device_name="MyDevice", source_name="MySource")
event.add_simple_reading("MyResource", "Int32", 1234)
event.tags["WhereAmI"] = "NotKansas"
xml = event.to_xml()
```

`Sample` offers functions with the pipeline signature
`(ctx, data) -> (continue_pipeline, result)`:

- `log_event_details` – logs an `Event` and each reading, passes it on.
- `send_get_command` – asks `ctx.command_client.device_core_commands_by_device_name(device)`
  for the device's `CoreCommand`s, issues the first one with `get` set through
  `issue_get_command_by_name(device, name, push_event=False, return_event=True)`
  and passes on what that returns.
- `convert_event_to_xml` – passes on `event.to_xml()` and increments a
  `Counter` (`events_converted_to_xml`), registering it once as
  `EventsConvertedToXML` with `ctx.metrics_manager.register(name, counter, None)`
  if the context has a metrics manager; otherwise it logs an error and keeps
  counting.
- `output_xml` – calls `ctx.set_response_data(xml_bytes)` and
  `ctx.set_response_content_type("application/xml")`, then ends the pipeline
  with `(False, None)`.

The context must provide `logger` (a `logging.Logger`) and `pipeline_id`,
plus whatever the function uses from the list above. A function that fails
returns `False` with a `PipelineError` as the result instead of raising.

## Setting up a service (`edgeapp.app`)

`App().create_and_run_app_service(service_key, new_service_factory)` calls
the factory with the key and then, on the service object it returns:

1. reads `logger`;
2. `get_app_setting_strings("DeviceNames")`;
3. `load_custom_config(service_config, "AppCustom")`, then validates it;
4. `listen_for_custom_config_changes(app_custom, "AppCustom", app.process_config_updates)`;
5. `set_default_functions_pipeline(...)` with a device-name filter,
   `log_event_details`, `convert_event_to_xml` and `output_xml`;
6. `add_functions_pipeline_for_topics(...)` for the `Floats` and `Int32s`
   pipelines;
7. reads `app_context`;
8. `add_custom_route("/api/v4/hello", True, app.hello_handler, "GET")`;
9. `run()`.

It returns `0` on success and `-1` if the factory returns `None` or any step
raises; the error is logged through the service's logger.

`process_config_updates(raw)` takes an updated `AppCustomConfig`, stores a
copy and logs which fields changed. `hello_handler(request)` returns
`(HTTPStatus.OK, b"hello")`.

## What this package does not do

It contains no application-service runtime: no message bus or MQTT
trigger, no HTTP server, no configuration provider and no command-service
client. These must be supplied as the service object and pipeline context
described above. The `edgeapp` command (option `--service-key`, default
`app-new-service`) has no runtime to start, so it logs an error and exits
with a failure status.