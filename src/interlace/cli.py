"""Command-line interface for Interlace.

Example:
    >>> # From terminal:
    >>> # interlace --version
    >>> # interlace handlers interlace.examples.run_demo:build_engine
    >>> # interlace handlers myapp.composition:engine --json
    >>> # interlace demo
"""

import importlib
import json
from typing import Annotated

import typer

from interlace import __version__
from interlace.dispatch import DiscoveryEngine, ServiceRegistry
from interlace.dispatch.matching import type_name
from interlace.errors import ModuleLoadError
from interlace.observability import configure_logging

app = typer.Typer(help="Interlace interaction discovery CLI.")

_verbose: bool = False


def _version_callback(value: bool) -> None:
    """Print the version and exit when requested."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


VERSION_OPTION = typer.Option(
    False,
    "--version",
    help="Show Interlace version and exit.",
    callback=_version_callback,
    is_eager=True,
)


@app.callback()
def cli(
    version: bool = VERSION_OPTION,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Interlace CLI entrypoint."""
    global _verbose
    _verbose = verbose
    configure_logging(log_level="DEBUG" if verbose else "WARNING", force=True)


def load_registry(target: str) -> ServiceRegistry:
    """Resolve ``module:attribute`` to a ServiceRegistry.

    The attribute may be a DiscoveryEngine, a ServiceRegistry, or a
    zero-argument callable returning either (a composition-root factory).

    Raises:
        ModuleLoadError: If the target cannot be imported or resolved.
    """
    module_name, sep, attr_name = target.partition(":")
    if not sep or not module_name or not attr_name:
        raise ModuleLoadError(target, "expected the form 'module:attribute'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ModuleLoadError(target, f"import failed: {exc}") from exc
    try:
        obj = getattr(module, attr_name)
    except AttributeError as exc:
        raise ModuleLoadError(target, f"module has no attribute '{attr_name}'") from exc

    if callable(obj) and not isinstance(obj, (DiscoveryEngine, ServiceRegistry)):
        try:
            obj = obj()
        except Exception as exc:
            raise ModuleLoadError(target, f"factory raised {type(exc).__name__}: {exc}") from exc

    if isinstance(obj, DiscoveryEngine):
        return obj.registry
    if isinstance(obj, ServiceRegistry):
        return obj
    raise ModuleLoadError(
        target, f"expected a DiscoveryEngine or ServiceRegistry, got {type(obj).__name__}"
    )


@app.command("handlers")
def handlers(
    target: Annotated[
        str,
        typer.Argument(help="Composition root as 'module:attribute'."),
    ],
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the listing as JSON."),
    ] = False,
) -> None:
    """List registered handlers by channel and input type, in dispatch order."""
    try:
        registry = load_registry(target)
    except ModuleLoadError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(1) from e

    listing = registry.describe()
    if as_json:
        payload = [
            {
                "channel": key.channel,
                "input_type": type_name(key.input_type),
                "handlers": names,
            }
            for key, names in listing
        ]
        typer.echo(json.dumps(payload, indent=2))
        return

    if not listing:
        typer.echo("No handlers registered.")
        return
    for key, names in listing:
        typer.echo(str(key))
        for position, name in enumerate(names, start=1):
            typer.echo(f"  {position}. {name}")
    if _verbose:
        typer.echo(f"{len(registry)} handlers under {len(listing)} keys")


@app.command("demo")
def demo() -> None:
    """Run the sketch/HTML integration demo and print what it discovers."""
    from interlace.examples.run_demo import main as run_demo

    run_demo()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
