"""Example document modules and workflow adapters using the discovery engine.

Modules:
    sketch_document: SketchDocument with click, semantic-URI and navigation handlers.
    html_document: HtmlDocument forwarding selections as MessageForward results.
    workflow: LetUserChoose and ForwardSelection task adapters.
    run_demo: Composition root wiring the documents together.
"""
