"""Template and conversion workflows on top of the imaging pipeline.

``StyleStudio`` is the seam between the HTTP layer and the pure pipeline:
it validates requests, calls the pipeline entry points and publishes the
results through the artifact store. Its collaborators are injected.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from picstyle.errors import TemplateValidationError
from picstyle.imaging import pipeline
from picstyle.templates import Template

if TYPE_CHECKING:
    from collections.abc import Sequence

    from picstyle.config import Settings
    from picstyle.storage import ArtifactStore
    from picstyle.style_model import StyleModelProvider
    from picstyle.templates import TemplateRepository

logger = logging.getLogger(__name__)

ARTIFACT_SUFFIX = ".jpg"


class StyleStudio:
    """Creates templates and converts photos against them."""

    def __init__(
        self,
        settings: Settings,
        repository: TemplateRepository,
        provider: StyleModelProvider,
        store: ArtifactStore,
    ) -> None:
        self._settings = settings
        self._repository = repository
        self._provider = provider
        self._store = store

    @property
    def repository(self) -> TemplateRepository:
        return self._repository

    @property
    def store(self) -> ArtifactStore:
        return self._store

    # -- Templates ----------------------------------------------------------

    def create_template(self, name: str, images: Sequence[bytes]) -> Template:
        """Validate, thumbnail and register a new template.

        The thumbnail is built from the first image. Nothing is stored if any
        step fails.

        Raises:
            TemplateValidationError: If the name is blank or the image count is out of range.
        """
        name = name.strip()
        if not name:
            raise TemplateValidationError("Template name is required")
        low, high = self._settings.min_template_images, self._settings.max_template_images
        if not low <= len(images) <= high:
            raise TemplateValidationError(f"A template needs between {low} and {high} images, got {len(images)}")

        template_id = uuid.uuid4().hex
        thumbnail = pipeline.make_thumbnail(
            images[0],
            size=self._settings.thumbnail_size,
            quality=self._settings.thumbnail_quality,
            max_pixels=self._settings.max_image_pixels,
        )
        model = self._provider.train(images, template_id)

        thumbnail_name = f"thumbnail-{template_id}{ARTIFACT_SUFFIX}"
        self._store.publish(thumbnail_name, thumbnail)

        template = Template(
            id=template_id,
            name=name,
            image_count=len(images),
            thumbnail=thumbnail_name,
            model=model,
        )
        self._repository.add(template)
        logger.info("Created template %s (%r, %d images)", template_id, name, len(images))
        return template

    def list_templates(self) -> list[Template]:
        return self._repository.list()

    def delete_template(self, template_id: str) -> None:
        """Remove a template and its thumbnail.

        Raises:
            TemplateNotFound: If no such template exists.
        """
        template = self._repository.delete(template_id)
        self._store.delete(template.thumbnail)
        logger.info("Deleted template %s", template_id)

    # -- Conversion ---------------------------------------------------------

    def convert(
        self,
        template_id: str,
        photo: bytes,
        *,
        outline: bool = False,
        colored: bool = False,
    ) -> dict[str, str]:
        """Produce the requested artifacts for ``photo`` and return their names.

        Keys are ``"outline"`` and/or ``"colored"``. Every requested artifact is
        encoded before any is published; if publishing fails part way, the
        artifacts already published by this call are removed.

        Raises:
            TemplateNotFound: If ``template_id`` is unknown.
        """
        template = self._repository.get(template_id)
        settings = self._settings
        encoded: dict[str, bytes] = {}

        if outline:
            data = pipeline.make_outline(
                photo,
                max_width=settings.canvas_max_width,
                max_height=settings.canvas_max_height,
                quality=settings.artifact_quality,
                max_pixels=settings.max_image_pixels,
            )
            encoded["outline"] = data

        if colored:
            data = pipeline.make_colored_illustration(
                photo,
                template.style_parameters,
                max_width=settings.canvas_max_width,
                max_height=settings.canvas_max_height,
                quality=settings.artifact_quality,
                max_pixels=settings.max_image_pixels,
            )
            encoded["colored"] = data

        results = self._publish_all(encoded)
        logger.info("Converted photo with template %s: %s", template_id, sorted(results))
        return results

    def _publish_all(self, encoded: dict[str, bytes]) -> dict[str, str]:
        results: dict[str, str] = {}
        try:
            for kind, data in encoded.items():
                name = f"{kind}-{uuid.uuid4().hex}{ARTIFACT_SUFFIX}"
                self._store.publish(name, data)
                results[kind] = name
        except BaseException:
            for name in results.values():
                self._store.delete(name)
            raise
        return results
