"""flowlayout CLI — lay out flow documents from the command line.

Commands:
    layout    Read a flow JSON document and write it back with node positions
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer

from flowlayout.config import NODE_HEIGHT, NODE_SPACING, NODE_WIDTH, ErrorPolicy, LayoutConfig
from flowlayout.errors import LayoutError
from flowlayout.flow import layout_flow

app = typer.Typer(
    name="flowlayout",
    help="Automatic left-to-right layout for flow diagrams.",
    no_args_is_help=True,
)


@app.callback()
def _root() -> None:
    """Automatic left-to-right layout for flow diagrams."""


def _read_document(source: str) -> dict:
    text = sys.stdin.read() if source == "-" else Path(source).read_text()
    return json.loads(text)


@app.command()
def layout(
    source: Annotated[str, typer.Argument(help="Flow JSON file, or '-' for stdin")],
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Write here instead of stdout")] = None,
    spacing: Annotated[float, typer.Option(help="Minimum gap between nodes in a column")] = NODE_SPACING,
    default_width: Annotated[float, typer.Option(help="Width for nodes without a size")] = NODE_WIDTH,
    default_height: Annotated[float, typer.Option(help="Height for nodes without a size")] = NODE_HEIGHT,
    on_error: Annotated[
        ErrorPolicy, typer.Option("--on-error", help="What to do when a group fails to lay out")
    ] = ErrorPolicy.RAISE,
    sequential: Annotated[bool, typer.Option("--sequential", help="Lay out groups one at a time")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log layout progress")] = False,
) -> None:
    """Lay out a flow document."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        document = _read_document(source)
    except (OSError, json.JSONDecodeError) as e:
        typer.echo(f"Error: could not read flow document '{source}': {e}", err=True)
        raise typer.Exit(1) from e
    if not isinstance(document, dict):
        typer.echo(f"Error: flow document must be a JSON object, got {type(document).__name__}", err=True)
        raise typer.Exit(1)

    try:
        config = LayoutConfig(
            spacing=spacing,
            default_width=default_width,
            default_height=default_height,
            on_delegate_error=on_error,
            concurrent=not sequential,
        )
        result = asyncio.run(layout_flow(document, config))
    except (ValueError, LayoutError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    text = json.dumps(result, indent=2)
    if output is None:
        typer.echo(text)
    else:
        output.write_text(text + "\n")


def main() -> None:
    """CLI entry point."""
    app()
