"""CLI entry point for treeclassify.

Invoked as::

    treeclassify [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m treeclassify.cli.main

Commands
--------
show        Render a stored tree
convert     Convert a stored tree between XML, JSON and YAML
version     Show version information
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from treeclassify.tree.nodes import Node

console = Console()
err_console = Console(stderr=True)

_FORMATS = ("xml", "json", "yaml")


def _format_of(path: str) -> str:
    """Guess a tree format from a file extension."""
    suffix = Path(path).suffix.lower()
    if suffix == ".json":
        return "json"
    if suffix in (".yaml", ".yml"):
        return "yaml"
    return "xml"


def _read_tree_or_exit(path: str, fmt: str | None) -> Node:
    """Read a tree file, exiting on error."""
    from treeclassify.tree import TreeSerializer, from_xml

    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        err_console.print(f"[red]Error:[/red] File not found: {path}")
        sys.exit(1)
    except OSError as exc:
        err_console.print(f"[red]Error:[/red] Cannot read {path}: {exc}")
        sys.exit(1)

    fmt = fmt or _format_of(path)
    serializer = TreeSerializer()
    try:
        if fmt == "json":
            return serializer.from_json(text)
        if fmt == "yaml":
            return serializer.from_yaml(text)
        return from_xml(text)
    except Exception as exc:
        err_console.print(f"[red]Error:[/red] {path} is not a valid {fmt} tree: {exc}")
        sys.exit(1)


def _node_label(node: Node) -> str:
    label = f"[bold]{node.name}[/bold]"
    if node.attributes:
        attrs = " ".join(f"[cyan]{k}[/cyan]={v!r}" for k, v in node.attributes.items())
        label += f" {attrs}"
    if node.text is not None:
        label += f" [green]{node.text!r}[/green]"
    return label


def _rich_tree(node: Node, branch: Tree | None = None) -> Tree:
    """Build a rich ``Tree`` mirroring ``node``."""
    tree = Tree(_node_label(node)) if branch is None else branch.add(_node_label(node))
    for child in node.children:
        _rich_tree(child, tree)
    return tree


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="treeclassify")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log engine activity at this level",
)
def cli(log_level: str | None) -> None:
    """Inspect and convert classify trees."""
    if log_level:
        logging.basicConfig(
            level=log_level.upper(),
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from treeclassify import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]treeclassify[/bold]", f"v{__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


# ---------------------------------------------------------------------------
# show command
# ---------------------------------------------------------------------------


@cli.command(name="show")
@click.argument("file", type=click.Path(exists=False))
@click.option("--from", "source_format", type=click.Choice(_FORMATS), default=None, help="Input format")
def show_command(file: str, source_format: str | None) -> None:
    """Render the tree stored in FILE.

    The format is taken from the file extension unless --from is given.
    """
    node = _read_tree_or_exit(file, source_format)
    console.print(_rich_tree(node))
    count = sum(1 for _ in node.walk())
    console.print(f"\n[bold]{count}[/bold] node(s)")


# ---------------------------------------------------------------------------
# convert command
# ---------------------------------------------------------------------------


@cli.command(name="convert")
@click.argument("file", type=click.Path(exists=False))
@click.option("--from", "source_format", type=click.Choice(_FORMATS), default=None, help="Input format")
@click.option("--to", "target_format", type=click.Choice(_FORMATS), default="json", help="Output format")
@click.option("--output", "-o", type=click.Path(), default=None, help="Write to this file")
def convert_command(
    file: str, source_format: str | None, target_format: str, output: str | None
) -> None:
    """Convert the tree stored in FILE to another format.

    Without --output, prints the converted tree to stdout.
    """
    from treeclassify.tree import TreeSerializer, to_xml

    node = _read_tree_or_exit(file, source_format)
    serializer = TreeSerializer()
    if target_format == "json":
        text = serializer.to_json(node)
    elif target_format == "yaml":
        text = serializer.to_yaml(node)
    else:
        text = to_xml(node)

    if output:
        Path(output).write_text(text if text.endswith("\n") else text + "\n", encoding="utf-8")
        console.print(f"[green]Wrote[/green] {output}")
    else:
        click.echo(text)


if __name__ == "__main__":
    cli()
