"""Protocol buffer schema for the Prometheus remote-write (v1) request.

Mirrors the subset of prometheus/prompb used by remote write::

    message WriteRequest { repeated TimeSeries timeseries = 1; }
    message TimeSeries   { repeated Label labels = 1; repeated Sample samples = 2; }
    message Label        { string name = 1; string value = 2; }
    message Sample       { double value = 1; int64 timestamp = 2; }

The descriptors are registered in a private pool so they cannot clash with
other copies of the ``prometheus`` package (e.g. the OpenTelemetry exporter's).
"""
from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

PACKAGE = "prometheus"

_FieldProto = descriptor_pb2.FieldDescriptorProto


def _add_field(message, name, number, field_type, repeated=False, type_name=None):
    field = message.field.add(
        name=name,
        number=number,
        type=field_type,
        label=_FieldProto.LABEL_REPEATED if repeated else _FieldProto.LABEL_OPTIONAL,
    )
    if type_name:
        field.type_name = f".{PACKAGE}.{type_name}"


def _build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="promwrite/remote.proto",
        package=PACKAGE,
        syntax="proto3",
    )

    label = file_proto.message_type.add(name="Label")
    _add_field(label, "name", 1, _FieldProto.TYPE_STRING)
    _add_field(label, "value", 2, _FieldProto.TYPE_STRING)

    sample = file_proto.message_type.add(name="Sample")
    _add_field(sample, "value", 1, _FieldProto.TYPE_DOUBLE)
    _add_field(sample, "timestamp", 2, _FieldProto.TYPE_INT64)

    timeseries = file_proto.message_type.add(name="TimeSeries")
    _add_field(timeseries, "labels", 1, _FieldProto.TYPE_MESSAGE, repeated=True, type_name="Label")
    _add_field(timeseries, "samples", 2, _FieldProto.TYPE_MESSAGE, repeated=True, type_name="Sample")

    write_request = file_proto.message_type.add(name="WriteRequest")
    _add_field(write_request, "timeseries", 1, _FieldProto.TYPE_MESSAGE, repeated=True, type_name="TimeSeries")
    # field 2 is reserved upstream, 3 (metadata) is not sent by this client
    write_request.reserved_range.add(start=2, end=3)

    return file_proto


_POOL = descriptor_pool.DescriptorPool()
DESCRIPTOR = _POOL.AddSerializedFile(_build_file_descriptor().SerializeToString())


def _message_class(name: str):
    return message_factory.GetMessageClass(_POOL.FindMessageTypeByName(f"{PACKAGE}.{name}"))


Label = _message_class("Label")
Sample = _message_class("Sample")
TimeSeries = _message_class("TimeSeries")
WriteRequest = _message_class("WriteRequest")
