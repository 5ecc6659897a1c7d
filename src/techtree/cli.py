"""CLI interface for techtree using Typer framework."""

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from techtree import __description__, __version__
from techtree.config import TechtreeConfig, load_config
from techtree.errors import PersistenceFailedError, TechtreeError
from techtree.graph import GraphController, NodeType, get_renderer
from techtree.logging_setup import configure_logging
from techtree.media import extract_video_id, make_clip
from techtree.store import JsonDocumentStore, SessionState, load_session, save_session
from techtree.store.sync import SnapshotSync

app = typer.Typer(
    name="techtree",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Configuration file path (default: search for .techtree.json)")
]
StoreOption = Annotated[
    Optional[Path],
    typer.Option("--store", "-s", help="Store directory (default: store.dir from config)")
]


@dataclass
class _Session:
    """A graph session opened from the store directory."""
    config: TechtreeConfig
    store_dir: Path
    store: JsonDocumentStore
    controller: GraphController

    def save(self) -> None:
        save_session(self.store_dir, SessionState(
            selected_node_id=self.controller.selected_node_id,
            annotation_mode=self.controller.annotation_mode,
        ))


def _open_session(ctx: typer.Context, config: Path | None, store: Path | None) -> _Session:
    techtree_config = load_config(config)
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    configure_logging(techtree_config.logging.level, verbose=verbose)

    store_dir = Path(store or techtree_config.store.dir)
    document_store = JsonDocumentStore(store_dir)
    controller = GraphController(techtree_config.layout, store=document_store)

    sync = SnapshotSync(document_store, controller, debounce_ms=techtree_config.store.debounce_ms)
    sync.start()
    sync.flush()
    sync.stop()

    # Restore without validation: a stale selection must surface on the next add
    state = load_session(store_dir)
    controller.selected_node_id = state.selected_node_id
    controller.annotation_mode = state.annotation_mode

    return _Session(techtree_config, store_dir, document_store, controller)


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"techtree version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version and exit")
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
) -> None:
    """techtree - Build annotated grappling technique trees."""
    ctx.obj = {"verbose": verbose}


@app.command()
def init(ctx: typer.Context, store: StoreOption = None, config: ConfigOption = None) -> None:
    """Create an empty store directory."""
    try:
        session = _open_session(ctx, config, store)
        session.store_dir.mkdir(parents=True, exist_ok=True)
        session.save()
    except (TechtreeError, ValueError) as e:
        _fail(str(e))

    console.print(f"[green]Initialized store:[/green] {session.store_dir}")


@app.command()
def add(
    ctx: typer.Context,
    node_type: Annotated[NodeType, typer.Argument(help="Node type: variant, myMove, opponentMove, outcome")],
    label: Annotated[str, typer.Argument(help="Display label")],
    clip: Annotated[Optional[str], typer.Option("--clip", help="Video URL or id to attach")] = None,
    start: Annotated[Optional[float], typer.Option("--start", help="Clip start in seconds")] = None,
    end: Annotated[Optional[float], typer.Option("--end", help="Clip end in seconds")] = None,
    loop: Annotated[bool, typer.Option("--loop/--no-loop", help="Loop clip playback")] = True,
    store: StoreOption = None,
    config: ConfigOption = None,
) -> None:
    """Add a node relative to the selected node; the new node becomes selected."""
    media = None
    if clip is not None:
        if start is None or end is None:
            _fail("--clip requires both --start and --end")
        try:
            media = make_clip(clip, start, end, loop)
        except ValueError as e:
            _fail(str(e))

    try:
        session = _open_session(ctx, config, store)
    except (TechtreeError, ValueError) as e:
        _fail(str(e))

    controller = session.controller
    try:
        node_id = controller.add_node(node_type, label, media=media)
    except PersistenceFailedError as e:
        console.print(f"[yellow]Warning:[/yellow] node applied locally but not saved: {e}")
        raise typer.Exit(1)
    except (TechtreeError, ValueError) as e:
        _fail(str(e))

    session.save()
    node = controller.graph.get_node(node_id)
    parent = node.parent_id or "-"
    console.print(f"[green]Added[/green] {node.node_type.value} '{node.label}'")
    console.print(f"  id: {node.id}")
    console.print(f"  parent: {parent}  depth: {node.depth}")


@app.command()
def select(
    ctx: typer.Context,
    node_id: Annotated[str, typer.Argument(help="Node id to select")],
    store: StoreOption = None,
    config: ConfigOption = None,
) -> None:
    """Select the anchor node for the next add."""
    try:
        session = _open_session(ctx, config, store)
    except (TechtreeError, ValueError) as e:
        _fail(str(e))

    session.controller.select_node(node_id)
    if session.controller.selected_node_id != node_id:
        console.print(f"[yellow]Unknown node {node_id}; selection unchanged[/yellow]")
        return

    session.save()
    console.print(f"[green]Selected[/green] {node_id}")


@app.command()
def connect(
    ctx: typer.Context,
    source: Annotated[str, typer.Argument(help="Source node id")],
    target: Annotated[str, typer.Argument(help="Target node id")],
    store: StoreOption = None,
    config: ConfigOption = None,
) -> None:
    """Add a free-form edge that does not change the tree structure."""
    try:
        session = _open_session(ctx, config, store)
        edge_id = session.controller.connect_manually(source, target)
    except (TechtreeError, ValueError) as e:
        _fail(str(e))

    console.print(f"[green]Connected[/green] {source} -> {target} (edge {edge_id})")


@app.command()
def move(
    ctx: typer.Context,
    node_id: Annotated[str, typer.Argument(help="Node id to move")],
    x: Annotated[float, typer.Argument(help="New x coordinate")],
    y: Annotated[float, typer.Argument(help="New y coordinate")],
    store: StoreOption = None,
    config: ConfigOption = None,
) -> None:
    """Manually reposition a node."""
    try:
        session = _open_session(ctx, config, store)
        session.controller.move_node(node_id, x, y)
    except (TechtreeError, ValueError) as e:
        _fail(str(e))

    if session.config.layout.preserve_manual_positions:
        console.print(f"[green]Pinned[/green] {node_id} at ({x}, {y})")
    else:
        console.print(f"[green]Moved[/green] {node_id} to ({x}, {y}); the next layout pass will reset it")


@app.command()
def reorganize(ctx: typer.Context, store: StoreOption = None, config: ConfigOption = None) -> None:
    """Clear manual pins and recompute the layout."""
    try:
        session = _open_session(ctx, config, store)
        session.controller.reorganize()
    except (TechtreeError, ValueError) as e:
        _fail(str(e))

    console.print("[green]Layout reorganized[/green]")


@app.command()
def annotate(ctx: typer.Context, store: StoreOption = None, config: ConfigOption = None) -> None:
    """Enter annotation mode; the next add leaves it."""
    try:
        session = _open_session(ctx, config, store)
        session.controller.begin_annotation()
        session.save()
    except (TechtreeError, ValueError) as e:
        _fail(str(e))

    console.print("[green]Annotation mode on[/green]")


@app.command()
def show(
    ctx: typer.Context,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: table, json (default: table)")
    ] = "table",
    store: StoreOption = None,
    config: ConfigOption = None,
) -> None:
    """Show nodes with their type, depth, parent and position."""
    valid_formats = ["table", "json"]
    if format not in valid_formats:
        _fail(f"Invalid format '{format}'. Must be one of: {', '.join(valid_formats)}")

    try:
        session = _open_session(ctx, config, store)
    except (TechtreeError, ValueError) as e:
        _fail(str(e))

    view = session.controller.view()
    if format == "json":
        typer.echo(get_renderer("json").render(view))
        return

    if not view.nodes:
        console.print("[yellow]No nodes yet[/yellow]")
        return

    table = Table(title=f"Technique tree ({len(view.nodes)} nodes, {len(view.edges)} edges)")
    table.add_column("", style="yellow")
    table.add_column("ID", style="dim")
    table.add_column("Label", style="cyan")
    table.add_column("Type", style="white")
    table.add_column("Depth", justify="right")
    table.add_column("Parent", style="dim")
    table.add_column("Position", justify="right")

    for node in view.nodes:
        marker = "*" if node.id == view.selected_node_id else ""
        position = f"{node.position.x:.0f}, {node.position.y:.0f}" if node.position else "-"
        table.add_row(
            marker,
            node.id[:8],
            node.label,
            node.node_type.value,
            str(node.depth),
            (node.parent_id or "-")[:8],
            position,
        )

    console.print(table)
    if view.annotation_mode:
        console.print("[dim]Annotation mode is on[/dim]")


@app.command()
def export(
    ctx: typer.Context,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: mermaid, json (default: mermaid)")
    ] = "mermaid",
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write to file instead of stdout")
    ] = None,
    store: StoreOption = None,
    config: ConfigOption = None,
) -> None:
    """Render the technique tree as a diagram or JSON document."""
    try:
        renderer = get_renderer(format)
        session = _open_session(ctx, config, store)
    except (TechtreeError, ValueError) as e:
        _fail(str(e))

    content = renderer.render(session.controller.view())
    if output is None:
        typer.echo(content)
        return

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(content, encoding="utf-8")
    except OSError as e:
        _fail(f"Failed to write {output}: {e}")
    console.print(f"[green]Wrote {renderer.format_name}:[/green] {output}")


@app.command("video-id")
def video_id(raw: Annotated[str, typer.Argument(help="Video URL or id")]) -> None:
    """Print the canonical video id for a URL or bare id."""
    typer.echo(extract_video_id(raw))


if __name__ == "__main__":
    app()
