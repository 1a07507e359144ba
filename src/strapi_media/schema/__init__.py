# ABOUTME: Content-type schema layer
# ABOUTME: Typed attribute variants and the uid-keyed schema registry

from .models import (
    Attribute,
    AttributeKind,
    ComponentAttribute,
    ContentTypeSchema,
    DynamicZoneAttribute,
    MediaAttribute,
    RelationAttribute,
    RichTextAttribute,
    ScalarAttribute,
    parse_attribute,
)
from .registry import SchemaRegistry

__all__ = [
    "Attribute",
    "AttributeKind",
    "ComponentAttribute",
    "ContentTypeSchema",
    "DynamicZoneAttribute",
    "MediaAttribute",
    "RelationAttribute",
    "RichTextAttribute",
    "ScalarAttribute",
    "SchemaRegistry",
    "parse_attribute",
]
