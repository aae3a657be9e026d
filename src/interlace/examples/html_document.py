"""HTML document module: forwards selections as semantic messages.

When an element of an annotated HTML page is selected, other documents
should learn which concept was selected. The handler answers on the
"/forward" channel with a MessageForward carrying the element's ontology
URI, addressed from the running workflow process.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from interlace.dispatch import DispatchContext, ResultAcceptor, service
from interlace.models import InterlaceBaseModel, MessageForward, SemanticUri

FORWARD_CHANNEL = "/forward"
SELECTION_CHANGED = "Message-onSelectionChanged"


class HtmlSelect(InterlaceBaseModel):
    """Selection of an element of an HTML page."""

    file_name: str
    element_id: str


class HtmlDocument:
    """An open HTML page whose elements are annotated with ontology URIs.

    Selecting an annotated element in the page yields a MessageForward on
    the /forward channel, so a workflow can pass the selection on.
    """

    def __init__(self, file_path: str, annotations: Mapping[str, str]) -> None:
        self.file_path = file_path
        self._uris = dict(annotations)

    @service(channel=FORWARD_CHANNEL)
    def forward_selection(
        self, select: HtmlSelect, acceptor: ResultAcceptor[Any], context: DispatchContext
    ) -> None:
        if select.file_name != self.file_path:
            return
        uri = self._uris.get(select.element_id)
        if uri is None:
            return
        acceptor.accept_result(
            MessageForward(
                sender_id=context.get_context_var("processInstanceId", int),
                message_type=SELECTION_CHANGED,
                data=SemanticUri(uri=uri),
            )
        )
