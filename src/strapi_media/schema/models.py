# ABOUTME: Typed content-type schema models with an explicit attribute kind per variant
# ABOUTME: Parses raw Strapi schema JSON into a discriminated union of attribute payloads

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class AttributeKind(str, Enum):
    """Attribute types the media walker distinguishes."""

    RICHTEXT = "richtext"
    MEDIA = "media"
    COMPONENT = "component"
    DYNAMICZONE = "dynamiczone"
    RELATION = "relation"
    SCALAR = "scalar"


class _AttributeBase(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class RichTextAttribute(_AttributeBase):
    kind: Literal[AttributeKind.RICHTEXT] = AttributeKind.RICHTEXT


class MediaAttribute(_AttributeBase):
    kind: Literal[AttributeKind.MEDIA] = AttributeKind.MEDIA
    multiple: bool = False
    allowed_types: list[str] | None = Field(default=None, alias="allowedTypes")


class ComponentAttribute(_AttributeBase):
    kind: Literal[AttributeKind.COMPONENT] = AttributeKind.COMPONENT
    component: str
    repeatable: bool = False


class DynamicZoneAttribute(_AttributeBase):
    kind: Literal[AttributeKind.DYNAMICZONE] = AttributeKind.DYNAMICZONE
    components: list[str] = Field(default_factory=list)


class RelationAttribute(_AttributeBase):
    kind: Literal[AttributeKind.RELATION] = AttributeKind.RELATION
    target: str | None = None
    relation: str | None = None


class ScalarAttribute(_AttributeBase):
    """Any attribute type that never holds media (string, integer, json, ...)."""

    kind: Literal[AttributeKind.SCALAR] = AttributeKind.SCALAR
    type_name: str = "unknown"


Attribute = Annotated[
    RichTextAttribute
    | MediaAttribute
    | ComponentAttribute
    | DynamicZoneAttribute
    | RelationAttribute
    | ScalarAttribute,
    Field(discriminator="kind"),
]

_attribute_adapter: TypeAdapter[Attribute] = TypeAdapter(Attribute)

_KNOWN_KINDS = {kind.value for kind in AttributeKind if kind is not AttributeKind.SCALAR}


def parse_attribute(raw: dict[str, Any]) -> Attribute:
    """Convert one raw Strapi attribute definition into its typed variant."""
    type_name = str(raw.get("type", "unknown"))
    if type_name in _KNOWN_KINDS:
        return _attribute_adapter.validate_python({**raw, "kind": AttributeKind(type_name)})
    return ScalarAttribute(type_name=type_name)


class ContentTypeSchema(BaseModel):
    """Attribute map for one content type or component, looked up by uid."""

    model_config = ConfigDict(frozen=True)

    uid: str
    attributes: dict[str, Attribute] = Field(default_factory=dict)

    @classmethod
    def from_strapi(cls, raw: dict[str, Any]) -> "ContentTypeSchema":
        """Build a schema from a content-type-builder entry.

        Accepts both ``{"uid": ..., "schema": {"attributes": ...}}`` and the
        flattened ``{"uid": ..., "attributes": ...}`` shape.
        """
        body = raw.get("schema") or raw
        attributes = {name: parse_attribute(definition) for name, definition in (body.get("attributes") or {}).items()}
        return cls(uid=raw["uid"], attributes=attributes)

    def attribute(self, name: str) -> Attribute:
        """Typed attribute for ``name``; names missing from the schema are opaque."""
        return self.attributes.get(name) or ScalarAttribute()
