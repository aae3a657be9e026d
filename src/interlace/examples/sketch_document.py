"""Sketch document module: a consumer of the discovery engine.

A SketchDocument knows which ontology URI each of its parts stands for.
It registers three handlers:

- a click on one of its own parts (default channel) turns into a context
  menu assembled from nested discoveries: one for the clicked element as
  a SoftwareObject, one for the element's SemanticUri;
- a SemanticUri (default channel) yields "Go to" entries pointing at the
  parts of this sketch that carry the same URI, unless the click came
  from this very sketch;
- a SoftwareObject on the "navigateTo" channel yields an action that
  selects the referenced part.

The originating file travels from the click handler to the nested
SemanticUri handlers through the "origFile" context variable.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from functools import partial
from typing import Any

from pydantic import Field

from interlace.dispatch import DispatchContext, ResultAcceptor, service
from interlace.models import (
    NAVIGATE_CHANNEL,
    InterlaceBaseModel,
    MenuItem,
    SemanticUri,
    SoftwareObject,
)
from interlace.observability import get_logger

logger = get_logger(__name__)

ORIG_FILE_VAR = "origFile"
PROCESS_INSTANCE_VAR = "processInstanceId"


class SketchSelect(InterlaceBaseModel):
    """A click on a part of a sketch."""

    file_name: str = Field(..., min_length=1)
    part_id: str = Field(..., min_length=1)
    x: int = 0
    y: int = 0


class SketchDocument:
    """An open sketch whose parts are annotated with ontology URIs.

    Args:
        file_path: Name of the sketch file
        parts: part id -> ontology URI
        on_select: Called with (file_path, part ids) when parts get selected;
            defaults to recording the selection in ``selections``
    """

    def __init__(
        self,
        file_path: str,
        parts: Mapping[str, str],
        on_select: Callable[[str, list[str]], None] | None = None,
    ) -> None:
        self.file_path = file_path
        self._uris = dict(parts)
        self._on_select = on_select
        self.selections: list[list[str]] = []
        self.last_click_position: tuple[int, int] | None = None

    def semantics(self, part_id: str) -> str | None:
        return self._uris.get(part_id)

    def parts_for(self, uri: str) -> list[str]:
        return [part_id for part_id, part_uri in self._uris.items() if part_uri == uri]

    def select_parts(self, part_ids: list[str], process_instance_id: int | None = None) -> None:
        logger.info(
            "interlace.example.sketch.select",
            file_path=self.file_path,
            part_ids=part_ids,
            process_instance_id=process_instance_id,
        )
        if self._on_select is not None:
            self._on_select(self.file_path, list(part_ids))
        else:
            self.selections.append(list(part_ids))

    @service(channel=NAVIGATE_CHANNEL, input_type=SoftwareObject)
    def navigate_to(
        self, obj: SoftwareObject, acceptor: ResultAcceptor[Any], context: DispatchContext
    ) -> None:
        if obj.file_name != self.file_path:
            return
        acceptor.accept_result(partial(self.select_parts, [obj.local_id]))

    @service
    def on_semantic_uri(
        self, uri: SemanticUri, acceptor: ResultAcceptor[Any], context: DispatchContext
    ) -> None:
        if context.get_context_var(ORIG_FILE_VAR, str) == self.file_path:
            return
        refs = self.parts_for(uri.uri)
        if not refs:
            return
        process_instance_id = context.get_context_var(PROCESS_INSTANCE_VAR, int)
        if len(refs) > 1:
            label = f"In {self.file_path} ({len(refs)})"
            explanation = "Show references in figure"
        else:
            label = f"In {self.file_path}"
            explanation = "Show reference in figure"
        acceptor.accept_result(
            MenuItem(
                frame="Go to",
                label=label,
                explanation=explanation,
                action=partial(self.select_parts, refs, process_instance_id),
            )
        )

    @service
    def on_click(
        self, click: SketchSelect, acceptor: ResultAcceptor[Any], context: DispatchContext
    ) -> None:
        if click.file_name != self.file_path:
            return
        context.set_context_var(ORIG_FILE_VAR, self.file_path)
        self.last_click_position = (click.x, click.y)

        engine = context.get_current_engine()
        element = SoftwareObject(file_name=self.file_path, uri=f"sketchid#{click.part_id}")
        items = engine.discover_many(element, MenuItem)

        uri = self.semantics(click.part_id)
        if uri is not None:
            items.extend(engine.discover_many(SemanticUri(uri=uri), MenuItem))

        for item in items:
            acceptor.accept_result(item)
