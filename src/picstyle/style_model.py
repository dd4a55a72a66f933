"""Style model provider.

Templates carry an opaque style model handle produced from their reference
images. The only provider shipped here is heuristic: it performs no
learning and hands back fixed styling parameters, so the pipeline can later
be pointed at a real model without changing its callers.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from picstyle.imaging.stylize import StyleParameters

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StyleModel:
    """Opaque handle for a template's style, passed through unchanged."""

    template_id: str
    token: str
    style_parameters: StyleParameters = field(default_factory=StyleParameters)


class StyleModelProvider(Protocol):
    """Protocol for turning reference images into a style model."""

    def train(self, images: Sequence[bytes], template_id: str) -> StyleModel:
        """Build a style model for ``template_id`` from encoded reference images."""
        ...


class HeuristicStyleModelProvider:
    """Returns fixed-parameter style models; no training takes place."""

    def __init__(self, style_parameters: StyleParameters | None = None) -> None:
        self._style_parameters = style_parameters or StyleParameters()

    def train(self, images: Sequence[bytes], template_id: str) -> StyleModel:
        digest = hashlib.sha256()
        for image in images:
            digest.update(hashlib.sha256(image).digest())
        token = f"heuristic:{digest.hexdigest()[:16]}"
        logger.info("Prepared style model %s for template %s from %d images", token, template_id, len(images))
        return StyleModel(template_id=template_id, token=token, style_parameters=self._style_parameters)
