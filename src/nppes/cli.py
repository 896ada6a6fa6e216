"""Command-line interface for NPPES ingestion and analytics."""

from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from nppes.errors import NppesError

if TYPE_CHECKING:
    from nppes.analytics.query import ProviderQuery
    from nppes.config.settings import NppesConfig
    from nppes.dataset import DatasetLoadResult

app = typer.Typer(
    name="nppes",
    help="Load NPPES provider files and query providers.",
    no_args_is_help=True,
)

console = Console()

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration YAML file.",
        exists=True,
        dir_okay=False,
    ),
]
DataDirOption = Annotated[
    Path | None,
    typer.Option(
        "--data-dir",
        "-d",
        help="Directory holding the NPPES files (overrides config).",
        file_okay=False,
    ),
]
SkipInvalidOption = Annotated[
    bool | None,
    typer.Option(
        "--skip-invalid/--strict",
        help="Skip invalid rows instead of aborting (default from config).",
    ),
]
StateOption = Annotated[
    list[str] | None,
    typer.Option("--state", "-s", help="Two-letter state code (repeatable, any-of)."),
]
TaxonomyOption = Annotated[
    list[str] | None,
    typer.Option("--taxonomy", "-t", help="Taxonomy code (repeatable, any-of)."),
]
EntityTypeOption = Annotated[
    str | None,
    typer.Option("--entity-type", "-e", help="individual|organization (or 1|2)."),
]
ActiveOption = Annotated[
    bool, typer.Option("--active", help="Only providers without a deactivation date.")
]
InactiveOption = Annotated[
    bool, typer.Option("--inactive", help="Only providers with a deactivation date.")
]
NameOption = Annotated[
    str | None, typer.Option("--name", help="Part of the provider name (any case).")
]
SpecialtyOption = Annotated[
    str | None,
    typer.Option("--specialty", help="Part of a taxonomy display name (any case)."),
]


def _build_config(
    config: Path | None,
    data_dir: Path | None,
    skip_invalid: bool | None = None,
) -> "NppesConfig":
    from nppes.config.loader import config_from_env, load_config
    from nppes.utils.logging import configure_logging

    try:
        nppes_config = load_config(config) if config is not None else config_from_env()
    except NppesError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e
    if data_dir is not None:
        nppes_config = nppes_config.model_copy(
            update={
                "data_paths": nppes_config.data_paths.model_copy(
                    update={"data_root": data_dir}
                )
            }
        )
    if skip_invalid is not None:
        nppes_config = nppes_config.model_copy(
            update={
                "ingestion": nppes_config.ingestion.model_copy(
                    update={"skip_invalid": skip_invalid}
                )
            }
        )
    configure_logging(nppes_config.logging)
    return nppes_config


def _load(nppes_config: "NppesConfig", *, include_references: bool = True) -> "DatasetLoadResult":
    from nppes.dataset import load_dataset

    console.print(f"[blue]Loading NPPES data from {nppes_config.data_root}[/blue]")
    result = load_dataset(nppes_config, include_references=include_references)
    for part, report in result.reports.items():
        line = f"  {part}: {report.accepted:,} records"
        if report.skipped:
            line += f" ([yellow]{report.skipped:,} skipped[/yellow])"
        console.print(line)
    return result


def _parse_date(value: str | None, option: str) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        console.print(f"[red]Error: {option} must be YYYY-MM-DD, got {value!r}[/red]")
        raise typer.Exit(code=1) from e


def _date_range(
    start_text: str | None, end_text: str | None, options: tuple[str, str]
) -> tuple[date | None, date | None]:
    return _parse_date(start_text, options[0]), _parse_date(end_text, options[1])


def _build_query(
    state: list[str] | None,
    taxonomy: list[str] | None,
    entity_type: str | None,
    active: bool,
    enumerated_from: str | None = None,
    enumerated_to: str | None = None,
    *,
    inactive: bool = False,
    name: str | None = None,
    specialty: str | None = None,
    primary_only: bool = False,
    updated_from: str | None = None,
    updated_to: str | None = None,
) -> "ProviderQuery":
    from nppes.analytics.query import ProviderQuery
    from nppes.models.identifiers import EntityType

    if active and inactive:
        console.print("[red]Error: Use either --active or --inactive, not both.[/red]")
        raise typer.Exit(code=1)

    states = state or []
    query = ProviderQuery().with_taxonomy(*(taxonomy or []))
    query = query.with_state(states[0]) if len(states) == 1 else query.with_states(*states)
    if entity_type is not None:
        names = {"individual": "1", "organization": "2"}
        try:
            query = query.with_entity_type(
                EntityType.from_code(names.get(entity_type.lower(), entity_type))
            )
        except NppesError as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            raise typer.Exit(code=1) from e
    query = (
        query.with_active_only(active)
        .with_inactive_only(inactive)
        .with_name(name)
        .with_specialty(specialty)
        .with_primary_taxonomy(primary_only)
    )

    enumerated = _date_range(enumerated_from, enumerated_to, ("--from", "--to"))
    updated = _date_range(updated_from, updated_to, ("--updated-from", "--updated-to"))
    try:
        if enumerated != (None, None):
            query = query.enumerated_between(*enumerated)
        if updated != (None, None):
            query = query.updated_between(*updated)
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e
    return query


@app.command()
def validate(
    config: ConfigOption = None,
    data_dir: DataDirOption = None,
    sample: Annotated[
        int,
        typer.Option("--sample", help="Data rows per file to parse in addition to the header."),
    ] = 0,
) -> None:
    """Validate NPPES file headers against their schemas."""
    from nppes.validation import ConsoleReporter, ValidationRunner

    console.print("[blue]Running file validation...[/blue]")
    nppes_config = _build_config(config, data_dir)

    results = ValidationRunner(nppes_config, sample_rows=sample).run()
    ConsoleReporter(console).print_results(results)

    if not all(r.passed for r in results):
        raise typer.Exit(code=1)


@app.command()
def stats(
    config: ConfigOption = None,
    data_dir: DataDirOption = None,
    skip_invalid: SkipInvalidOption = None,
) -> None:
    """Load the dataset and show summary statistics."""
    from nppes.analytics.statistics import DatasetStatistics

    nppes_config = _build_config(config, data_dir, skip_invalid)
    try:
        result = _load(nppes_config)
    except NppesError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    statistics = DatasetStatistics.from_store(result.store)
    table = Table(title="NPPES Dataset Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    for name, value in statistics.to_dict().items():
        shown = f"{value:,}" if isinstance(value, int) else str(value or "-")
        table.add_row(name.replace("_", " ").capitalize(), shown)
    console.print(table)


@app.command()
def query(
    config: ConfigOption = None,
    data_dir: DataDirOption = None,
    skip_invalid: SkipInvalidOption = None,
    state: StateOption = None,
    taxonomy: TaxonomyOption = None,
    entity_type: EntityTypeOption = None,
    active: ActiveOption = False,
    enumerated_from: Annotated[
        str | None, typer.Option("--from", help="Enumerated on or after (YYYY-MM-DD).")
    ] = None,
    enumerated_to: Annotated[
        str | None, typer.Option("--to", help="Enumerated on or before (YYYY-MM-DD).")
    ] = None,
    updated_from: Annotated[
        str | None,
        typer.Option("--updated-from", help="Last updated on or after (YYYY-MM-DD)."),
    ] = None,
    updated_to: Annotated[
        str | None,
        typer.Option("--updated-to", help="Last updated on or before (YYYY-MM-DD)."),
    ] = None,
    inactive: InactiveOption = False,
    name: NameOption = None,
    specialty: SpecialtyOption = None,
    primary_only: Annotated[
        bool, typer.Option("--primary-only", help="Only providers with a primary taxonomy.")
    ] = False,
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-n", min=1, help="Rows to show (default from config)."),
    ] = None,
) -> None:
    """Find providers matching all given filters."""
    from nppes.analytics.enrichment import enrich
    from nppes.analytics.query import execute

    nppes_config = _build_config(config, data_dir, skip_invalid)
    provider_query = _build_query(
        state,
        taxonomy,
        entity_type,
        active,
        enumerated_from,
        enumerated_to,
        inactive=inactive,
        name=name,
        specialty=specialty,
        primary_only=primary_only,
        updated_from=updated_from,
        updated_to=updated_to,
    )
    try:
        result = _load(nppes_config)
    except NppesError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    matches = execute(result.store, provider_query)
    shown = limit if limit is not None else nppes_config.query.result_limit

    table = Table(title=f"Providers ({len(matches):,} matches)")
    table.add_column("NPI", style="cyan", no_wrap=True)
    table.add_column("Type")
    table.add_column("Name")
    table.add_column("State")
    table.add_column("Primary taxonomy")
    table.add_column("Active", justify="center")
    for enriched in enrich(result.store, providers=matches[:shown]):
        provider = enriched.provider
        primary = enriched.primary_taxonomy
        taxonomy_text = "-"
        if primary is not None:
            taxonomy_text = primary.code
            if primary.display_name:
                taxonomy_text += f" ({primary.display_name})"
        table.add_row(
            provider.npi,
            str(provider.entity_type) if provider.entity_type else "-",
            provider.display_name or "-",
            provider.state or "-",
            taxonomy_text,
            "[green]yes[/green]" if provider.is_active else "[red]no[/red]",
        )
    console.print(table)
    if len(matches) > shown:
        console.print(f"[dim]Showing {shown} of {len(matches):,}[/dim]")


@app.command()
def top(
    kind: Annotated[str, typer.Argument(help="What to rank: states or taxonomies.")],
    config: ConfigOption = None,
    data_dir: DataDirOption = None,
    skip_invalid: SkipInvalidOption = None,
    n: Annotated[
        int | None,
        typer.Option("--n", "-n", min=1, help="Number of entries (default from config)."),
    ] = None,
    active: ActiveOption = False,
) -> None:
    """Rank states or taxonomy codes by provider count."""
    from nppes.analytics.aggregation import top_states, top_taxonomies
    from nppes.analytics.enrichment import describe_taxonomy
    from nppes.models.records import TaxonomyCode

    if kind not in ("states", "taxonomies"):
        console.print(f"[red]Error: Invalid kind '{kind}'. Use 'states' or 'taxonomies'.[/red]")
        raise typer.Exit(code=1)

    nppes_config = _build_config(config, data_dir, skip_invalid)
    count = n if n is not None else nppes_config.query.default_top_n
    try:
        result = _load(nppes_config, include_references=kind == "taxonomies")
    except NppesError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    provider_query = _build_query(None, None, None, active)
    store = result.store
    ranking = (
        top_states(store, count, provider_query)
        if kind == "states"
        else top_taxonomies(store, count, provider_query)
    )

    table = Table(title=f"Top {count} {kind}")
    table.add_column("Rank", justify="right")
    table.add_column("State" if kind == "states" else "Taxonomy", style="cyan")
    if kind == "taxonomies":
        table.add_column("Description")
    table.add_column("Providers", justify="right", style="green")
    for rank, (key, providers) in enumerate(ranking, start=1):
        row = [str(rank), key]
        if kind == "taxonomies":
            described = describe_taxonomy(TaxonomyCode(key), store.taxonomy)
            row.append(described.display_name or "-")
        row.append(f"{providers:,}")
        table.add_row(*row)
    console.print(table)


@app.command()
def export(
    what: Annotated[
        str, typer.Argument(help="What to export: providers, states or taxonomies.")
    ],
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Output file (.csv or .json).", dir_okay=False),
    ],
    config: ConfigOption = None,
    data_dir: DataDirOption = None,
    skip_invalid: SkipInvalidOption = None,
    state: StateOption = None,
    taxonomy: TaxonomyOption = None,
    entity_type: EntityTypeOption = None,
    active: ActiveOption = False,
    inactive: InactiveOption = False,
    name: NameOption = None,
    specialty: SpecialtyOption = None,
) -> None:
    """Export providers or provider counts as CSV or JSON."""
    from nppes.analytics.aggregation import count_by_state, count_by_taxonomy, top_n
    from nppes.analytics.query import execute
    from nppes.export.frames import counts_frame, providers_frame, write_frame

    if what not in ("providers", "states", "taxonomies"):
        console.print(
            f"[red]Error: Invalid export '{what}'. Use providers, states or taxonomies.[/red]"
        )
        raise typer.Exit(code=1)
    if output.suffix.lower() not in (".csv", ".json"):
        console.print(f"[red]Error: Unsupported format '{output.suffix}'. Use .csv or .json.[/red]")
        raise typer.Exit(code=1)

    nppes_config = _build_config(config, data_dir, skip_invalid)
    provider_query = _build_query(
        state, taxonomy, entity_type, active, inactive=inactive, name=name, specialty=specialty
    )
    try:
        result = _load(nppes_config, include_references=specialty is not None)
    except NppesError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    store = result.store
    if what == "providers":
        df = providers_frame(execute(store, provider_query))
    elif what == "states":
        counts = count_by_state(store, provider_query)
        df = counts_frame(top_n(counts, len(counts)), key="state")
    else:
        counts = count_by_taxonomy(store, provider_query)
        df = counts_frame(top_n(counts, len(counts)), key="taxonomy_code")

    write_frame(df, output)
    console.print(f"[green]Wrote {len(df):,} rows to {output}[/green]")


@app.command()
def version() -> None:
    """Show version information."""
    from nppes import __version__

    console.print(f"nppes version {__version__}")


if __name__ == "__main__":
    app()
