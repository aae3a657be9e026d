"""Interaction result and seed models shared by document modules.

These are the values that typically travel through the discovery engine:
- SoftwareObject: an element inside a particular document (a seed)
- SemanticUri: the ontology concept an element stands for (a seed)
- MenuItem: a context-menu candidate offered by a handler (a result)
- MessageForward: a message one component forwards to another (a result)
"""

from typing import Any, Callable

from pydantic import Field

from interlace.models.base import InterlaceBaseModel


class SoftwareObject(InterlaceBaseModel):
    """Reference to an element of an open document.

    Attributes:
        file_name: Path or name of the document holding the element
        uri: Element locator inside the document (e.g. "htmlid#node-3")
    """

    file_name: str = Field(..., min_length=1)
    uri: str = Field(..., min_length=1)

    @property
    def local_id(self) -> str:
        """Part of the uri after the first '#', or the whole uri if it has none."""
        _, sep, rest = self.uri.partition("#")
        return rest if sep else self.uri


class SemanticUri(InterlaceBaseModel):
    """An ontology URI naming the concept behind a document element."""

    uri: str = Field(..., min_length=1)


class MenuItem(InterlaceBaseModel):
    """A context-menu entry proposed by a handler.

    The optional ``action`` is what the UI executes when the entry is
    chosen. It is excluded from serialization.

    Attributes:
        label: Text shown for the entry
        frame: Menu group the entry belongs to (e.g. "Go to")
        explanation: Longer description, used as a tooltip
        action: Zero-argument callable run by ``run()``
    """

    label: str
    frame: str = ""
    explanation: str = ""
    action: Callable[[], Any] | None = Field(default=None, exclude=True, repr=False)

    def run(self) -> Any:
        if self.action is None:
            return None
        return self.action()


class MessageForward(InterlaceBaseModel):
    """A message a handler proposes to forward to another component.

    Attributes:
        sender_id: Identifier of the originating component or process
        message_type: Name of the message (e.g. "Message-onSelectionChanged")
        data: Message body, opaque to the engine
    """

    sender_id: int | None = None
    message_type: str
    data: Any = None
