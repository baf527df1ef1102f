"""agent-discover CLI — ingest, search, rank and generate corpus documents."""

from __future__ import annotations

import functools
import json
from functools import cached_property
from pathlib import Path
from typing import Any

import click

from agent_discover.config import Settings
from agent_discover.core.analyser import DomainAnalyser, DomainAnalysis
from agent_discover.core.documents import DocumentType
from agent_discover.core.embeddings import Embedder, EmbeddingError, get_embedder
from agent_discover.core.generator import TemplateGenerator
from agent_discover.core.indexer import CorpusIndexer
from agent_discover.core.leaderboard import Leaderboard
from agent_discover.core.retriever import CorpusRetriever
from agent_discover.core.validator import CorpusValidator
from agent_discover.db.client import VectorStoreClient, VectorStoreError
from agent_discover.utils.logging import setup_logging

DOC_TYPES = [t.value for t in DocumentType]


class Services:
    """Lazily built collaborators for one CLI invocation."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @cached_property
    def store(self) -> VectorStoreClient:
        return VectorStoreClient(
            base_url=self.settings.qdrant_url,
            collection=self.settings.collection,
            api_key=self.settings.qdrant_api_key or None,
            batch_size=self.settings.batch_size,
        )

    @cached_property
    def embedder(self) -> Embedder:
        return get_embedder(self.settings)

    @cached_property
    def retriever(self) -> CorpusRetriever:
        return CorpusRetriever(self.store, self.embedder)

    @cached_property
    def indexer(self) -> CorpusIndexer:
        return CorpusIndexer(
            self.store,
            self.embedder,
            max_chars=self.settings.chunk_max_chars,
            overlap=self.settings.chunk_overlap,
            batch_size=self.settings.batch_size,
            corpus_root=self.settings.corpus_dir,
        )

    @cached_property
    def generator(self) -> TemplateGenerator:
        analyser = DomainAnalyser(self.retriever, target_score=self.settings.target_score)
        return TemplateGenerator(analyser)


def _format_table(rows: list[dict], columns: list[str]) -> str:
    """Simple table formatter."""
    if not rows:
        return "No results."
    widths = {c: len(c) for c in columns}
    for row in rows:
        for c in columns:
            widths[c] = max(widths[c], len(_cell(row.get(c, ""))))

    header = "  ".join(c.upper().ljust(widths[c]) for c in columns)
    separator = "  ".join("-" * widths[c] for c in columns)
    lines = [header, separator]
    for row in rows:
        lines.append("  ".join(_cell(row.get(c, "")).ljust(widths[c]) for c in columns))
    return "\n".join(lines)


def _cell(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)


def _output(ctx: click.Context, data: Any, columns: list[str] | None = None) -> None:
    fmt = ctx.meta.get("output_format", "table")
    if fmt == "json":
        click.echo(json.dumps(data, indent=2, default=str))
    elif isinstance(data, list) and columns:
        click.echo(_format_table(data, columns))
    else:
        click.echo(json.dumps(data, indent=2, default=str))


def _handle_errors(func):
    """Report library errors as CLI errors instead of tracebacks."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (VectorStoreError, EmbeddingError, ValueError, FileExistsError) as e:
            raise click.ClickException(str(e)) from e

    return wrapper


@click.group()
@click.option(
    "--qdrant-url", default=None, envvar="AGENT_DISCOVER_QDRANT_URL", help="Vector database URL"
)
@click.option("--collection", default=None, help="Collection holding the corpus")
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table")
@click.option("--log-level", default=None, help="Log level (default from settings)")
@click.version_option(package_name="agent-discover")
@click.pass_context
def cli(
    ctx: click.Context,
    qdrant_url: str | None,
    collection: str | None,
    output_format: str,
    log_level: str | None,
) -> None:
    """Find, rank and generate agents, instructions, prompts and chatmodes."""
    overrides: dict[str, Any] = {}
    if qdrant_url:
        overrides["qdrant_url"] = qdrant_url
    if collection:
        overrides["collection"] = collection
    if log_level:
        overrides["log_level"] = log_level
    settings = Settings(**overrides)
    setup_logging(settings.log_level)
    ctx.obj = Services(settings)
    ctx.meta["output_format"] = output_format


# --- Ingest ---


@cli.command()
@click.argument("path", required=False, type=click.Path(path_type=Path))
@click.option("--clear", is_flag=True, help="Drop and recreate the collection first")
@click.pass_context
@_handle_errors
def ingest(ctx: click.Context, path: Path | None, clear: bool) -> None:
    """Embed the corpus under PATH into the vector store."""
    services: Services = ctx.obj
    root = path or Path(services.settings.corpus_dir)
    report = services.indexer.ingest(root, clear=clear)
    if ctx.meta.get("output_format") == "json":
        _output(ctx, report.to_dict())
        return
    action = "Re-ingested" if clear else "Ingested"
    click.echo(f"{action} {report.documents} documents ({report.chunks} chunks) from {root}")
    for doc_type, count in report.by_type.items():
        click.echo(f"  {doc_type}: {count}")
    if report.skipped:
        click.echo(f"Skipped {report.skipped} empty documents")
    for failure in report.failed:
        click.echo(f"Failed: {failure['path']}: {failure['error']}", err=True)


# --- Search ---


@cli.command()
@click.argument("query")
@click.option("--type", "-t", "doc_type", type=click.Choice(DOC_TYPES), default=None)
@click.option("--limit", "-n", default=10, show_default=True, type=click.IntRange(min=1))
@click.option("--min-score", default=0.0, type=click.FloatRange(0.0, 1.0))
@click.pass_context
@_handle_errors
def search(
    ctx: click.Context, query: str, doc_type: str | None, limit: int, min_score: float
) -> None:
    """Search the corpus by similarity."""
    services: Services = ctx.obj
    hits = services.retriever.search(query, limit=limit, doc_type=doc_type, min_score=min_score)
    rows = [h.to_dict() for h in hits]
    if ctx.meta.get("output_format") == "json":
        _output(ctx, rows)
        return
    for row in rows:
        row["score"] = f"{row['percent']:.1f}%"
    _output(ctx, rows, ["score", "name", "doc_type", "path"])
    if hits and hits[0].score < services.settings.target_score:
        click.echo(
            f"\nTop relevance {hits[0].percent:.1f}% is below the "
            f"{services.settings.target_score:.0%} target.",
            err=True,
        )


# --- Leaderboard ---


@cli.command()
@click.option("--subject", "-s", required=True, help="Subject to rank documents for")
@click.option("--type", "-t", "doc_type", type=click.Choice(DOC_TYPES), default=None)
@click.option("--limit", "-n", default=10, show_default=True, type=click.IntRange(min=1))
@click.pass_context
@_handle_errors
def leaderboard(ctx: click.Context, subject: str, doc_type: str | None, limit: int) -> None:
    """Rank documents by how well they cover a subject."""
    services: Services = ctx.obj
    board = Leaderboard(services.retriever)
    rows = [e.to_dict() for e in board.rank(subject, limit=limit, doc_type=doc_type)]
    if ctx.meta.get("output_format") == "json":
        _output(ctx, rows)
        return
    for row in rows:
        row["score"] = f"{row['percent']:.1f}%"
    _output(ctx, rows, ["rank", "score", "name", "doc_type", "subject_match"])


# --- Create ---


def _echo_analysis(analysis: DomainAnalysis) -> None:
    click.echo(f"Domain:         {analysis.domain}")
    explicit = " (requested)" if analysis.type_explicit else " (suggested)"
    click.echo(f"Type:           {analysis.suggested_type.value}{explicit}")
    click.echo(f"File:           {analysis.filename}")
    status = "meets" if analysis.meets_target else "below"
    click.echo(
        f"Top relevance:  {analysis.top_score * 100:.1f}% "
        f"({status} {analysis.target_score:.0%} target)"
    )
    click.echo(f"Vocabulary:     {', '.join(analysis.vocabulary) or '-'}")
    click.echo(f"Subjects:       {', '.join(analysis.subjects) or '-'}")
    click.echo(f"Tools:          {', '.join(analysis.tools) or '-'}")
    click.echo("")
    rows = []
    for hit in analysis.related:
        rows.append(
            {
                "score": f"{hit.percent:.1f}%",
                "name": hit.name,
                "type": hit.doc_type,
                "path": hit.path,
            }
        )
    click.echo(_format_table(rows, ["score", "name", "type", "path"]))


@cli.command()
@click.argument("domain")
@click.option("--type", "-t", "doc_type", type=click.Choice(DOC_TYPES), default=None)
@click.option("--output", "-o", "output_dir", type=click.Path(path_type=Path), default=None)
@click.option("--analyze-only", is_flag=True, help="Show related documents and vocabulary only")
@click.option("--prompt-only", is_flag=True, help="Print an LLM prompt instead of a skeleton")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@click.pass_context
@_handle_errors
def create(
    ctx: click.Context,
    domain: str,
    doc_type: str | None,
    output_dir: Path | None,
    analyze_only: bool,
    prompt_only: bool,
    force: bool,
) -> None:
    """Create a new document for DOMAIN from related corpus documents."""
    if analyze_only and prompt_only:
        raise click.UsageError("--analyze-only and --prompt-only are mutually exclusive")
    services: Services = ctx.obj
    generator = services.generator
    as_json = ctx.meta.get("output_format") == "json"

    if analyze_only:
        analysis = generator.analyse(domain, doc_type)
        if as_json:
            _output(ctx, analysis.to_dict())
        else:
            _echo_analysis(analysis)
        return

    if prompt_only:
        analysis = generator.analyse(domain, doc_type)
        click.echo(generator.build_prompt(analysis))
        return

    target, analysis = generator.create(
        domain,
        doc_type=doc_type,
        output_dir=output_dir or Path(services.settings.output_dir),
        force=force,
    )
    if as_json:
        _output(ctx, {"path": str(target), **analysis.to_dict()})
        return
    click.echo(
        f"Created {target} ({analysis.suggested_type.value}, "
        f"{len(analysis.related)} related documents)"
    )
    if not analysis.meets_target:
        click.echo(
            f"Top relevance {analysis.top_score * 100:.1f}% is below the "
            f"{analysis.target_score:.0%} target; the corpus may not cover this domain yet.",
            err=True,
        )


# --- Stats ---


@cli.command()
@click.pass_context
@_handle_errors
def stats(ctx: click.Context) -> None:
    """Show document and chunk counts in the collection."""
    services: Services = ctx.obj
    data = services.retriever.stats()
    if ctx.meta.get("output_format") == "json":
        _output(ctx, data)
        return
    click.echo(f"Collection: {data['collection']}")
    click.echo(f"Documents:  {data['documents']}")
    click.echo(f"Chunks:     {data['chunks']}")
    for doc_type, count in data["by_type"].items():
        click.echo(f"  {doc_type}: {count}")


# --- Validate ---


@cli.command()
@click.argument("path", required=False, type=click.Path(path_type=Path))
@click.pass_context
@_handle_errors
def validate(ctx: click.Context, path: Path | None) -> None:
    """Lint corpus documents under PATH."""
    services: Services = ctx.obj
    root = path or Path(services.settings.corpus_dir)
    result = CorpusValidator().validate(root)
    rows = [
        {"severity": f.severity, "path": f.path, "rule": f.rule, "message": f.message}
        for f in result.findings
    ]
    if ctx.meta.get("output_format") == "json":
        _output(ctx, {"checked": result.checked, "ok": result.ok, "findings": rows})
    else:
        if rows:
            click.echo(_format_table(rows, ["severity", "path", "rule", "message"]))
        click.echo(
            f"Checked {result.checked} documents: "
            f"{len(result.errors)} errors, {len(result.warnings)} warnings",
            err=True,
        )
    if not result.ok:
        ctx.exit(1)


if __name__ == "__main__":
    cli()
