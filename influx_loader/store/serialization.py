"""
Conversion of loader points into InfluxDB client points.
"""

from influxdb_client_3 import Point as InfluxPoint
from influxdb_client_3 import WritePrecision

from influx_loader.core.models import Point, TypedValue, ValueKind
from influx_loader.core.schema.timeformat import format_rfc3339


def field_value(value: TypedValue):
    """
    Map a typed value onto a line-protocol field value.

    Timestamps become RFC 3339 strings since fields cannot hold times.

    Raises:
        ValueError: For null values, which are never written
    """
    if value.kind is ValueKind.INTEGER:
        return int(value.value)
    if value.kind is ValueKind.FLOAT:
        return float(value.value)
    if value.kind is ValueKind.BOOLEAN:
        return bool(value.value)
    if value.kind is ValueKind.STRING:
        return str(value.value)
    if value.kind is ValueKind.TIMESTAMP:
        return format_rfc3339(value.value)
    raise ValueError(f"Cannot write a {value.kind.value} value")


def to_influx_point(point: Point) -> InfluxPoint:
    """Build the client-side point for one loader point."""
    influx_point = InfluxPoint(point.measurement)
    for key, tag in point.tags.items():
        influx_point = influx_point.tag(key, tag)
    for key, value in point.fields.items():
        influx_point = influx_point.field(key, field_value(value))
    if point.timestamp is not None:
        influx_point = influx_point.time(point.timestamp, WritePrecision.NS)
    return influx_point
