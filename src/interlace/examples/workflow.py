"""Workflow task adapters built on the discovery engine.

Workflow engines hand task adapters a loosely typed parameter map. These
adapters pick the typed values they need with ``first_of_type`` and use
the discovery engine to turn them into user-facing choices.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from interlace.dispatch import DiscoveryEngine, first_of_type
from interlace.models import MenuItem, MessageForward
from interlace.observability import get_logger

logger = get_logger(__name__)

Chooser = Callable[[Sequence[MenuItem]], MenuItem | None]


class LetUserChoose:
    """Offer a list of menu items from the task parameters and run the chosen one."""

    def __init__(self, chooser: Chooser) -> None:
        self._chooser = chooser

    def execute(self, parameters: Mapping[str, Any]) -> MenuItem | None:
        choices = first_of_type(parameters, list)
        if not choices:
            logger.error("interlace.example.workflow.no_choices", parameters=sorted(parameters))
            return None
        items = [item for item in choices if isinstance(item, MenuItem)]
        chosen = self._chooser(items)
        if chosen is not None:
            chosen.run()
        return chosen


class ForwardSelection:
    """Collect the messages registered modules want forwarded for a selection.

    The selection is the first parameter of ``seed_type``; the process
    instance id, when present, is passed to handlers as "processInstanceId".
    """

    def __init__(self, engine: DiscoveryEngine, seed_type: type, channel: str = "/forward") -> None:
        self._engine = engine
        self._seed_type = seed_type
        self._channel = channel

    def execute(
        self, parameters: Mapping[str, Any], process_instance_id: int | None = None
    ) -> list[MessageForward]:
        seed = first_of_type(parameters, self._seed_type)
        if seed is None:
            logger.error(
                "interlace.example.workflow.no_selection",
                seed_type=self._seed_type.__qualname__,
            )
            return []
        context_vars = None
        if process_instance_id is not None:
            context_vars = {"processInstanceId": process_instance_id}
        messages = self._engine.discover_many(
            seed, MessageForward, self._channel, context_vars=context_vars
        )
        logger.info(
            "interlace.example.workflow.forward",
            channel=self._channel,
            message_count=len(messages),
            process_instance_id=process_instance_id,
        )
        return messages
