"""Run the Interlace document-integration demo.

Two sketches annotate parts with the same ontology concepts. Clicking a
part of the first sketch yields a context menu whose entries point at the
matching parts of the second sketch; choosing an entry selects them.
An HTML page forwards its selection as a semantic message.
"""

from __future__ import annotations

from interlace.dispatch import DiscoveryEngine, create_engine
from interlace.examples.html_document import HtmlDocument, HtmlSelect
from interlace.examples.sketch_document import SketchDocument, SketchSelect
from interlace.examples.workflow import ForwardSelection
from interlace.models import MenuItem
from interlace.observability import get_logger

logger = get_logger(__name__)

PUMP_URI = "http://example.org/ontology#Pump"
VALVE_URI = "http://example.org/ontology#Valve"


def build_engine() -> DiscoveryEngine:
    """Composition root of the demo: three documents on one engine."""
    overview = SketchDocument("overview.svg", {"p1": PUMP_URI, "v1": VALVE_URI})
    detail = SketchDocument("detail.svg", {"p7": PUMP_URI, "p8": PUMP_URI, "v3": VALVE_URI})
    page = HtmlDocument("manual.html", {"pump-section": PUMP_URI})
    return create_engine(overview, detail, page)


def main() -> list[str]:
    """Print the menu for a click on the overview's pump and run the first entry.

    Returns:
        The printed menu lines.
    """
    engine = build_engine()

    click = SketchSelect(file_name="overview.svg", part_id="p1", x=120, y=40)
    items = engine.discover_many(click, MenuItem)
    lines = [f"{item.frame}: {item.label} - {item.explanation}" for item in items]
    for line in lines:
        print(line)
    if items:
        items[0].run()

    forward = ForwardSelection(engine, HtmlSelect)
    messages = forward.execute(
        {"selection": HtmlSelect(file_name="manual.html", element_id="pump-section")},
        process_instance_id=1,
    )
    for message in messages:
        line = f"forward {message.message_type} -> {message.data.uri}"
        lines.append(line)
        print(line)

    logger.info("interlace.example.demo.completed", menu_items=len(items), messages=len(messages))
    return lines


if __name__ == "__main__":
    main()
