"""Command-line interface for home-semantics."""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer

from home_semantics import __version__
from home_semantics.config import CatalogConfig, SemanticsSettings, load_config
from home_semantics.items.loader import ItemModelError, load_item_model
from home_semantics.items.provider import InMemoryItemRegistry
from home_semantics.semantic.resolver import SemanticTypeResolver
from home_semantics.state.metadata_cache import SemanticsMetadataCache
from home_semantics.tags.catalog import CatalogError, load_catalog, load_default_catalog
from home_semantics.validation.catalog_validator import CatalogValidator

app = typer.Typer(
    name="home-semantics",
    help="Semantic tag classification and relation inference for home-automation items",
    no_args_is_help=True,
)

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config.yaml"),
]
CatalogOption = Annotated[
    Optional[Path],
    typer.Option("--catalog", help="Tag catalog YAML (overrides config)"),
]


def _settings(config: Optional[Path]) -> SemanticsSettings:
    if config:
        return SemanticsSettings(config_file=config)
    return SemanticsSettings()


@app.callback()
def callback() -> None:
    """home-semantics CLI."""
    pass


@app.command()
def run(config: ConfigOption = None) -> None:
    """Run the semantics service."""
    from home_semantics.daemon import run_service

    cfg = load_config(_settings(config))
    try:
        run_service(cfg)
    except (CatalogError, ItemModelError) as e:
        typer.echo(f"Startup error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def validate(config: ConfigOption = None, catalog: CatalogOption = None) -> None:
    """Validate the tag catalog and report ambiguous suffixes."""
    cfg = load_config(_settings(config))
    path = catalog or cfg.catalog.path

    try:
        definitions = load_catalog(path) if path else load_default_catalog()
        report = CatalogValidator().validate(definitions)
    except CatalogError as e:
        typer.echo(f"Catalog error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Catalog: {path or 'built-in'}")
    typer.echo(f"  Definitions: {report.definitions}")
    typer.echo(f"  Lookup keys: {report.lookup_keys}")
    for issue in report.issues:
        typer.echo(f"  [{issue.issue_type.value}] {issue.message}")

    if report.has_collisions and cfg.catalog.fail_on_collisions:
        raise typer.Exit(1)


@app.command()
def classify(
    model: Annotated[Path, typer.Argument(help="Item model YAML file")],
    config: ConfigOption = None,
    catalog: CatalogOption = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON")] = False,
) -> None:
    """Print the resolved semantic metadata for an item model."""
    from home_semantics.daemon import build_registry

    cfg = load_config(_settings(config))
    catalog_config = CatalogConfig(
        path=catalog or cfg.catalog.path,
        fail_on_collisions=cfg.catalog.fail_on_collisions,
    )

    try:
        registry = build_registry(catalog_config)
        items = InMemoryItemRegistry(load_item_model(model))
    except (CatalogError, ItemModelError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    cache = SemanticsMetadataCache(
        SemanticTypeResolver(registry),
        items,
        refresh_neighbors=cfg.semantics.refresh_neighbors,
    )
    cache.start()
    records = cache.get_all()
    cache.stop()

    if as_json:
        typer.echo(json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False))
        return

    for record in records:
        relations = ", ".join(f"{k}={v}" for k, v in sorted(record.relations.items()))
        suffix = f" [{relations}]" if relations else ""
        typer.echo(f"{record.item_name}: {record.semantic_type}{suffix}")


@app.command()
def lookup(
    text: Annotated[str, typer.Argument(help="Tag id, id suffix, label or synonym")],
    config: ConfigOption = None,
    catalog: CatalogOption = None,
    locale: Annotated[Optional[str], typer.Option("--locale", "-l")] = None,
) -> None:
    """Resolve a tag by id, suffix, label or synonym."""
    from home_semantics.daemon import build_registry

    cfg = load_config(_settings(config))
    try:
        registry = build_registry(CatalogConfig(path=catalog or cfg.catalog.path))
    except CatalogError as e:
        typer.echo(f"Catalog error: {e}", err=True)
        raise typer.Exit(1)

    locale = locale or cfg.semantics.preferred_locale
    definition = registry.lookup(text) or registry.get_by_label_or_synonym(text, locale)
    if definition is None:
        typer.echo(f"No tag matches {text!r}", err=True)
        raise typer.Exit(1)

    typer.echo(json.dumps(definition.to_dict(), indent=2, ensure_ascii=False))


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"home-semantics {__version__}")


if __name__ == "__main__":
    app()
