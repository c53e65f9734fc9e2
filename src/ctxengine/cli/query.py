"""ctxengine query command."""

import asyncio
import json
from pathlib import Path

import click
import yaml

from ctxengine.config import ContextEngineSettings, load_settings
from ctxengine.context.engine import ContextEngine
from ctxengine.context.models import (
    ContextAnalysis,
    ContextKind,
    ContextRequest,
    Selection,
)
from ctxengine.errors import InvalidRequestError
from ctxengine.logging import configure_logging
from ctxengine.providers.files import LocalFileReader
from ctxengine.providers.workspace import WorkspaceIndex, WorkspaceLanguageServer


def _parse_selection(value: str | None) -> Selection | None:
    if value is None:
        return None
    try:
        start, _, end = value.partition(":")
        start_line = int(start)
        end_line = int(end) if end else start_line
    except ValueError:
        raise click.BadParameter(
            "expected START:END line numbers", param_hint="--selection"
        ) from None
    if start_line < 1 or end_line < start_line:
        raise click.BadParameter(
            "lines are one-based and END must not precede START",
            param_hint="--selection",
        )
    return Selection(
        text="",
        start_line=start_line,
        start_column=0,
        end_line=end_line,
        end_column=0,
    )


async def _run_query(
    settings: ContextEngineSettings, request: ContextRequest
) -> ContextAnalysis:
    reader = LocalFileReader(settings.workspace_root)
    index = WorkspaceIndex(settings.workspace_root, file_reader=reader)
    await index.build()

    engine = ContextEngine(
        WorkspaceLanguageServer(index),
        index,
        file_reader=reader,
        settings=settings,
    )
    engine.initialize()
    return await engine.get_context(request)


def _echo_analysis(analysis: ContextAnalysis) -> None:
    click.echo(analysis.summary)
    click.echo()

    for item in analysis.items:
        location = item.source_path
        if item.line is not None:
            location += f":{item.line}"
        click.echo(f"[{item.relevance_score:.2f}] {item.kind.value:<13} {location}")

    if analysis.suggestions:
        click.echo()
        click.echo("Suggestions:")
        for suggestion in analysis.suggestions:
            click.echo(f"  - {suggestion}")

    if analysis.related_queries:
        click.echo()
        click.echo(f"Related: {', '.join(analysis.related_queries)}")

    click.echo()
    click.echo(f"Total relevance: {analysis.total_relevance:.2f}")


@click.command()
@click.argument("query_text", metavar="QUERY")
@click.option(
    "--workspace",
    "-w",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Workspace root to index (default: configured root).",
)
@click.option("--file", "-f", "current_file", help="File the cursor is in.")
@click.option("--selection", "-s", help="Selected lines as START:END (one-based).")
@click.option("--max-items", "-n", type=click.IntRange(min=1), help="Result cap.")
@click.option(
    "--type",
    "-t",
    "include_types",
    multiple=True,
    type=click.Choice([kind.value for kind in ContextKind]),
    help="Context kinds to include (repeatable, default all).",
)
@click.option(
    "--no-workspace-search",
    is_flag=True,
    help="Skip the workspace-wide search source.",
)
@click.option("--json", "as_json", is_flag=True, help="Emit the analysis as JSON.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file overriding the defaults.",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Override the configured log level.",
)
def query(
    query_text: str,
    workspace: Path | None,
    current_file: str | None,
    selection: str | None,
    max_items: int | None,
    include_types: tuple[str, ...],
    no_workspace_search: bool,
    as_json: bool,
    config_path: Path | None,
    log_level: str | None,
) -> None:
    """Gather and rank context for QUERY from a local workspace."""
    try:
        settings = load_settings(config_path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise click.ClickException(f"Cannot load config: {e}") from e

    if workspace is not None:
        settings = settings.model_copy(update={"workspace_root": workspace})
    configure_logging(log_level or settings.log_level, settings.log_format)

    try:
        request = ContextRequest(
            query=query_text,
            current_file=current_file,
            current_selection=_parse_selection(selection),
            max_items=max_items,
            include_types=include_types or [kind.value for kind in ContextKind],
            workspace_scope=not no_workspace_search,
        )
    except InvalidRequestError as e:
        raise click.UsageError(str(e)) from e

    analysis = asyncio.run(_run_query(settings, request))

    if as_json:
        click.echo(json.dumps(analysis.to_dict(), indent=2))
    else:
        _echo_analysis(analysis)
