"""Console rendering for the CLI (catalog listing, validation report, banner).

Color scheme:
- **official**: bold green star.
- **community**: cyan circle.
- **deprecated**: red tag after the name.
"""

from __future__ import annotations

from typing import Dict, List, Optional, TextIO

from rich.console import Console
from rich.table import Table
from rich.text import Text

from levante_catalog.catalog.aggregator import CatalogAggregator
from levante_catalog.catalog.models import CanonicalDescriptor
from levante_catalog.catalog.validation import FileValidationResult, summarize
from levante_catalog.constants import API_PREFIX, OPENAPI_PATH, SERVER_NAME, SERVER_VERSION


def _console(file: Optional[TextIO] = None) -> Console:
    return Console(file=file, highlight=False)


def _source_badge(source: str) -> Text:
    if source == "official":
        return Text("★", style="bold green")
    return Text("○", style="cyan")


def select_descriptors(
    aggregator: CatalogAggregator,
    *,
    source: Optional[str] = None,
    service: Optional[str] = None,
) -> Dict[str, List[CanonicalDescriptor]]:
    """Descriptors grouped by service, filtered by *source* / *service*."""
    grouped: Dict[str, List[CanonicalDescriptor]] = {}
    for name in aggregator.get_service_names():
        if service is not None and name != service:
            continue
        descriptors = aggregator.get_by_service(name)
        if source is not None:
            descriptors = [d for d in descriptors if d.source == source]
        if descriptors:
            grouped[name] = descriptors
    return grouped


def render_catalog(
    aggregator: CatalogAggregator,
    *,
    source: Optional[str] = None,
    service: Optional[str] = None,
    file: Optional[TextIO] = None,
) -> None:
    """Print one table per service plus a summary."""
    console = _console(file)
    grouped = select_descriptors(aggregator, source=source, service=service)

    console.print(Text("MCP Catalog", style="bold"))
    for name, descriptors in grouped.items():
        meta = aggregator.get_service_meta(name)
        title = f"{meta.display_name if meta else name} ({name}/)"
        table = Table(title=title, title_justify="left", show_edge=False)
        table.add_column("", width=1)
        table.add_column("Name")
        table.add_column("Id", style="dim")
        table.add_column("Transport")
        for d in descriptors:
            label = Text(d.name)
            if d.status == "deprecated":
                label.append(" [DEPRECATED]", style="red")
            table.add_row(_source_badge(d.source), label, d.id, d.transport)
        console.print(table)

    flat = [d for ds in grouped.values() for d in ds]
    console.print(Text("Summary", style="bold"))
    console.print(f"Total MCPs: {len(flat)}")
    console.print(f"Official: {sum(1 for d in flat if d.source == 'official')}")
    console.print(f"Community: {sum(1 for d in flat if d.source == 'community')}")
    console.print(f"Services: {len(aggregator.get_service_names())}")


def render_validation(
    results: List[FileValidationResult],
    *,
    file: Optional[TextIO] = None,
) -> None:
    """Print ✓ / ✗ per file, error details and the totals line."""
    console = _console(file)
    for result in results:
        if result.valid:
            console.print(Text(f"✓ {result.file}", style="green"))
            continue
        console.print(Text(f"✗ {result.file}", style="bold red"))
        for error in result.errors:
            console.print(Text(f"    - {error}", style="red"))

    counts = summarize(results)
    console.print("---------------------")
    console.print(
        f"Total: {counts['total']} | Valid: {counts['valid']} | Invalid: {counts['invalid']}"
    )


def render_startup_banner(
    host: str,
    port: int,
    log_fpath: str,
    aggregator: CatalogAggregator,
    *,
    file: Optional[TextIO] = None,
) -> None:
    console = _console(file)
    counts = aggregator.get_count_by_source()
    base = f"http://{host}:{port}"
    console.print(Text(f"{SERVER_NAME} v{SERVER_VERSION}", style="bold"))
    console.print(
        f"  Catalog:  {counts['official'] + counts['community']} MCP(s) in "
        f"{len(aggregator.get_service_names())} service(s)"
    )
    console.print(f"  API:      {base}{API_PREFIX}/mcps.json")
    console.print(f"  OpenAPI:  {base}{OPENAPI_PATH}")
    console.print(f"  Log file: {log_fpath}")
