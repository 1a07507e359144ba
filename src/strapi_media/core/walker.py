# ABOUTME: Schema-driven walk over Strapi entities that resolves every referenced media file
# ABOUTME: Dispatches on attribute kind and recurses into components, dynamic zones and relations

import asyncio
import copy
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from strapi_media.core.base import SchemaNotFoundError
from strapi_media.core.context import MediaContext
from strapi_media.core.models import RemoteFileDescriptor, ResolvedMedia
from strapi_media.extraction.markdown import ExtractedImageRef, extract_images
from strapi_media.schema.models import (
    Attribute,
    AttributeKind,
    ComponentAttribute,
    MediaAttribute,
    RelationAttribute,
)
from strapi_media.utils.logging import get_logger, with_pipeline_context

# Dynamic zone elements name their component under one of these keys
COMPONENT_KEYS = ("__component", "strapi_component")

Entity = dict[str, Any]


class SchemaWalker:
    """Builds a copy of an entity tree with local file ids attached.

    Input entities are never modified. Media attributes gain ``localFile`` on
    every resolved file; rich-text attributes become ``{"data", "medias"}``.
    """

    def __init__(self, context: MediaContext):
        self.context = context
        self.logger = get_logger(__name__)
        self._handlers: dict[AttributeKind, Callable[[Any, Any], Awaitable[Any]]] = {
            AttributeKind.RICHTEXT: self._walk_rich_text,
            AttributeKind.MEDIA: self._walk_media,
            AttributeKind.COMPONENT: self._walk_component,
            AttributeKind.DYNAMICZONE: self._walk_dynamic_zone,
            AttributeKind.RELATION: self._walk_relation,
        }

    async def walk(self, entity: Mapping[str, Any], uid: str) -> Entity:
        """Return a transformed copy of ``entity`` using the schema for ``uid``.

        A missing schema leaves the subtree unchanged.
        """
        try:
            schema = self.context.schemas.get_schema(uid)
        except SchemaNotFoundError:
            self.logger.warning("Unknown content type, leaving subtree untouched", uid=uid)
            return copy.deepcopy(dict(entity))

        names = list(entity)
        values = await asyncio.gather(*(self._walk_attribute(schema.attribute(name), entity[name]) for name in names))
        return dict(zip(names, values, strict=True))

    async def _walk_attribute(self, attribute: Attribute, value: Any) -> Any:
        handler = self._handlers.get(attribute.kind)
        if handler is None or not value:
            return copy.deepcopy(value)
        return await handler(attribute, value)

    # --- Rich text -----------------------------------------------------------------------
    async def _walk_rich_text(self, attribute: Attribute, value: Any) -> Entity:
        if isinstance(value, Mapping):
            output = copy.deepcopy(dict(value))
            text = value.get("data") or ""
        else:
            text = str(value)
            output = {"data": text}

        references = extract_images(text, self.context.api_base, self.context.parser)
        resolved = await asyncio.gather(*(self._resolve_reference(ref) for ref in references))

        medias = list(output.get("medias") or [])
        medias.extend(media.to_entity_value() for media in resolved if media is not None)
        output["medias"] = medias
        return output

    async def _resolve_reference(self, reference: ExtractedImageRef) -> ResolvedMedia | None:
        lookup_url = self.context.relative_file_url(reference.url)
        try:
            descriptor = await self.context.files.find_file(lookup_url)
        except Exception as e:
            self.logger.warning("File metadata lookup failed", url=lookup_url, error=str(e))
            return None

        if descriptor is None:
            self.logger.debug("Rich-text image is not a Strapi upload", url=lookup_url)
            return None

        node_id = await self.context.resolver.resolve_file(descriptor)
        if node_id is None:
            return None

        return ResolvedMedia(
            alternative_text=reference.alternative_text,
            url=reference.url,
            src=reference.src,
            local_file=node_id,
            file=descriptor.raw(),
        )

    # --- Media ---------------------------------------------------------------------------
    async def _walk_media(self, attribute: MediaAttribute, value: Any) -> Any:
        is_list = attribute.multiple and isinstance(value, Sequence) and not isinstance(value, str)
        files = list(value) if is_list else [value]

        node_ids = await asyncio.gather(*(self._resolve_media_file(raw) for raw in files))

        output = []
        for raw, node_id in zip(files, node_ids, strict=True):
            item = copy.deepcopy(dict(raw) if isinstance(raw, Mapping) else raw)
            if node_id is not None:
                item["localFile"] = node_id
            output.append(item)
        return output if is_list else output[0]

    async def _resolve_media_file(self, raw: Any) -> str | None:
        if not isinstance(raw, Mapping):
            return None
        try:
            descriptor = RemoteFileDescriptor.model_validate(raw)
        except ValueError as e:
            self.logger.warning("Ignoring malformed media value", error=str(e))
            return None
        return await self.context.resolver.resolve_file(descriptor)

    # --- Nested structures ---------------------------------------------------------------
    async def _walk_component(self, attribute: ComponentAttribute, value: Any) -> Any:
        return await self._walk_nested(value, attribute.component)

    async def _walk_relation(self, attribute: RelationAttribute, value: Any) -> Any:
        if attribute.target is None:
            return copy.deepcopy(value)
        return await self._walk_nested(value, attribute.target)

    async def _walk_dynamic_zone(self, attribute: Attribute, value: Any) -> Any:
        if not isinstance(value, list):
            return copy.deepcopy(value)
        return list(await asyncio.gather(*(self._walk_zone_element(element) for element in value)))

    async def _walk_zone_element(self, element: Any) -> Any:
        if not isinstance(element, Mapping):
            return copy.deepcopy(element)
        uid = next((element[key] for key in COMPONENT_KEYS if element.get(key)), None)
        if uid is None:
            self.logger.warning("Dynamic zone element without a component type")
            return copy.deepcopy(dict(element))
        return await self.walk(element, uid)

    async def _walk_nested(self, value: Any, uid: str) -> Any:
        """Walk one nested entity or each entity of a list with the same schema."""
        if isinstance(value, Mapping):
            return await self.walk(value, uid)
        if isinstance(value, list):
            return list(await asyncio.gather(*(self._walk_nested(item, uid) for item in value)))
        return copy.deepcopy(value)


async def download_media_files(
    entities: Sequence[Mapping[str, Any]],
    context: MediaContext,
    content_type_uid: str,
) -> list[Entity]:
    """Resolve the media of every entity in a batch concurrently.

    Args:
        entities: Entities of one content type
        context: Schemas, resolver and metadata source for the walk
        content_type_uid: uid of the entities' content type

    Returns:
        Transformed copies of the entities, in input order
    """
    walker = SchemaWalker(context)
    with with_pipeline_context("download_media_files", content_type=content_type_uid) as logger:
        logger.info("Resolving media", entities=len(entities))
        results = await asyncio.gather(*(walker.walk(entity, content_type_uid) for entity in entities))
        logger.info("Resolved media", entities=len(results))
        return list(results)


def collect_local_files(tree: Any) -> list[str]:
    """Every ``localFile`` id attached anywhere in ``tree``, in traversal order."""
    found: list[str] = []
    if isinstance(tree, Mapping):
        local_file = tree.get("localFile")
        if isinstance(local_file, str):
            found.append(local_file)
        for key, value in tree.items():
            if key != "localFile":
                found.extend(collect_local_files(value))
    elif isinstance(tree, list):
        for item in tree:
            found.extend(collect_local_files(item))
    return found
