"""Template records and their repository."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol

from picstyle.errors import TemplateNotFound

if TYPE_CHECKING:
    from picstyle.imaging.stylize import StyleParameters
    from picstyle.style_model import StyleModel


@dataclass(frozen=True)
class Template:
    """A named bundle of reference images and the style model built from them."""

    id: str
    name: str
    image_count: int
    thumbnail: str
    model: StyleModel
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def style_parameters(self) -> StyleParameters:
        return self.model.style_parameters


class TemplateRepository(Protocol):
    """Protocol for template storage."""

    def get(self, template_id: str) -> Template:
        """Return the template or raise :class:`TemplateNotFound`."""
        ...

    def list(self) -> list[Template]:
        """Return all templates in insertion order."""
        ...

    def add(self, template: Template) -> None:
        """Store a new template."""
        ...

    def delete(self, template_id: str) -> Template:
        """Remove and return a template or raise :class:`TemplateNotFound`."""
        ...


class InMemoryTemplateRepository:
    """Thread-safe, process-local template store."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._templates: dict[str, Template] = {}

    def get(self, template_id: str) -> Template:
        with self._lock:
            try:
                return self._templates[template_id]
            except KeyError:
                raise TemplateNotFound(template_id) from None

    def list(self) -> list[Template]:
        with self._lock:
            return list(self._templates.values())

    def add(self, template: Template) -> None:
        with self._lock:
            if template.id in self._templates:
                raise ValueError(f"Template already exists: {template.id}")
            self._templates[template.id] = template

    def delete(self, template_id: str) -> Template:
        with self._lock:
            try:
                return self._templates.pop(template_id)
            except KeyError:
                raise TemplateNotFound(template_id) from None
