"""Message classes for the pprof ``perftools.profiles`` schema.

The schema is the one in ``profile.proto`` next to this module. Instead of
shipping protoc output, the descriptor is declared here field by field and
the classes are created with protobuf's message factory in a private pool,
so importing this module never clashes with another copy of the schema
registered in the default pool.
"""

from typing import List, Optional, Tuple

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

PACKAGE = "perftools.profiles"

_F = descriptor_pb2.FieldDescriptorProto

# (name, number, type, repeated, message type)
_FieldSpec = Tuple[str, int, int, bool, Optional[str]]

_MESSAGES: List[Tuple[str, List[_FieldSpec]]] = [
    ("Profile", [
        ("sample_type", 1, _F.TYPE_MESSAGE, True, "ValueType"),
        ("sample", 2, _F.TYPE_MESSAGE, True, "Sample"),
        ("mapping", 3, _F.TYPE_MESSAGE, True, "Mapping"),
        ("location", 4, _F.TYPE_MESSAGE, True, "Location"),
        ("function", 5, _F.TYPE_MESSAGE, True, "Function"),
        ("string_table", 6, _F.TYPE_STRING, True, None),
        ("drop_frames", 7, _F.TYPE_INT64, False, None),
        ("keep_frames", 8, _F.TYPE_INT64, False, None),
        ("time_nanos", 9, _F.TYPE_INT64, False, None),
        ("duration_nanos", 10, _F.TYPE_INT64, False, None),
        ("period_type", 11, _F.TYPE_MESSAGE, False, "ValueType"),
        ("period", 12, _F.TYPE_INT64, False, None),
        ("comment", 13, _F.TYPE_INT64, True, None),
        ("default_sample_type", 14, _F.TYPE_INT64, False, None),
    ]),
    ("ValueType", [
        ("type", 1, _F.TYPE_INT64, False, None),
        ("unit", 2, _F.TYPE_INT64, False, None),
    ]),
    ("Sample", [
        ("location_id", 1, _F.TYPE_UINT64, True, None),
        ("value", 2, _F.TYPE_INT64, True, None),
        ("label", 3, _F.TYPE_MESSAGE, True, "Label"),
    ]),
    ("Label", [
        ("key", 1, _F.TYPE_INT64, False, None),
        ("str", 2, _F.TYPE_INT64, False, None),
        ("num", 3, _F.TYPE_INT64, False, None),
        ("num_unit", 4, _F.TYPE_INT64, False, None),
    ]),
    ("Mapping", [
        ("id", 1, _F.TYPE_UINT64, False, None),
        ("memory_start", 2, _F.TYPE_UINT64, False, None),
        ("memory_limit", 3, _F.TYPE_UINT64, False, None),
        ("file_offset", 4, _F.TYPE_UINT64, False, None),
        ("filename", 5, _F.TYPE_INT64, False, None),
        ("build_id", 6, _F.TYPE_INT64, False, None),
        ("has_functions", 7, _F.TYPE_BOOL, False, None),
        ("has_filenames", 8, _F.TYPE_BOOL, False, None),
        ("has_line_numbers", 9, _F.TYPE_BOOL, False, None),
        ("has_inline_frames", 10, _F.TYPE_BOOL, False, None),
    ]),
    ("Location", [
        ("id", 1, _F.TYPE_UINT64, False, None),
        ("mapping_id", 2, _F.TYPE_UINT64, False, None),
        ("address", 3, _F.TYPE_UINT64, False, None),
        ("line", 4, _F.TYPE_MESSAGE, True, "Line"),
        ("is_folded", 5, _F.TYPE_BOOL, False, None),
    ]),
    ("Line", [
        ("function_id", 1, _F.TYPE_UINT64, False, None),
        ("line", 2, _F.TYPE_INT64, False, None),
        ("column", 3, _F.TYPE_INT64, False, None),
    ]),
    ("Function", [
        ("id", 1, _F.TYPE_UINT64, False, None),
        ("name", 2, _F.TYPE_INT64, False, None),
        ("system_name", 3, _F.TYPE_INT64, False, None),
        ("filename", 4, _F.TYPE_INT64, False, None),
        ("start_line", 5, _F.TYPE_INT64, False, None),
    ]),
]


def build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    """Build the FileDescriptorProto equivalent of ``profile.proto``."""
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="fst2pprof/profile.proto",
        package=PACKAGE,
        syntax="proto3",
    )
    for message_name, fields in _MESSAGES:
        message = file_proto.message_type.add(name=message_name)
        for field_name, number, field_type, repeated, type_name in fields:
            field = message.field.add(
                name=field_name,
                number=number,
                type=field_type,
                label=_F.LABEL_REPEATED if repeated else _F.LABEL_OPTIONAL,
            )
            if type_name is not None:
                field.type_name = f".{PACKAGE}.{type_name}"
    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(build_file_descriptor().SerializeToString())


def _message_class(name: str):
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{PACKAGE}.{name}"))


Profile = _message_class("Profile")
ValueType = _message_class("ValueType")
Sample = _message_class("Sample")
Label = _message_class("Label")
Mapping = _message_class("Mapping")
Location = _message_class("Location")
Line = _message_class("Line")
Function = _message_class("Function")

__all__ = [
    "PACKAGE", "build_file_descriptor",
    "Profile", "ValueType", "Sample", "Label", "Mapping", "Location", "Line", "Function",
]
