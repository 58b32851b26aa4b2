"""Command-line interface for gtetools.

This module provides the main entry point for the gtetools CLI tool.
It uses Click to define commands for converting and summarizing gene
annotations.

Commands:
    gff-to-refflat: Convert GTF/GFF3 to refFlat
    refflat-to-gff: Convert refFlat to GTF/GFF3 with UTR and codon features
    stats: Summarize an annotation file

Example:
    $ gtetools --help
    $ gtetools gff-to-refflat annotation.gtf annotation.refFlat
    $ gtetools refflat-to-gff --gff-type gff3 annotation.refFlat - > annotation.gff3
    $ gtetools stats --json annotation.refFlat
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import IO

import click
from rich.console import Console
from rich.table import Table

from gtetools import __version__
from gtetools.config import Config
from gtetools.exceptions import ConfigurationError, GteError
from gtetools.io.gff import GffReader, GffType, GffWriter
from gtetools.io.refflat import RefFlatReader, RefFlatWriter
from gtetools.qc.stats import AnnotationStats, collect_stats
from gtetools.utils.logging import Timer, setup_logging

logger = logging.getLogger(__name__)

# Records may be streamed to stdout; messages go to stderr
console = Console(stderr=True)


@click.group()
@click.version_option(version=__version__, prog_name="gtetools")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug output.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    help="YAML configuration file.",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write debug-level logs to this file.",
)
@click.pass_context
def main(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    config_path: Path | None,
    log_file: Path | None,
) -> None:
    """gtetools: Gene annotation conversion with exon feature inference.

    Converts between refFlat, GTF and GFF3, inferring UTR, CDS, start codon
    and stop codon features from exon and coding coordinates.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    verbosity = 0 if quiet else 2 if verbose else 1
    setup_logging(verbosity=verbosity, log_file=log_file)

    try:
        ctx.obj["config"] = Config.load(config_path)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)


def _resolve_gff_type(option: str | None, config: Config, handle: IO[str]) -> GffType:
    value = option or config.io.gff_type
    if value is not None:
        return GffType(value)
    try:
        return GffType.from_path(handle)
    except GteError:
        console.print("[red]Error:[/red] Cannot infer the GFF type of the input; use --gff-type")
        raise SystemExit(1)


def _report(ctx: click.Context, n_written: int, n_skipped: int, what: str) -> None:
    if ctx.obj.get("quiet"):
        return
    console.print(f"[green]Wrote {n_written} {what}[/green]")
    if n_skipped:
        console.print(f"[yellow]Skipped {n_skipped} malformed record(s)[/yellow]")


# =============================================================================
# gff-to-refflat command
# =============================================================================


@main.command("gff-to-refflat")
@click.argument("input_file", metavar="INPUT", type=click.File("r"))
@click.argument("output_file", metavar="OUTPUT", type=click.File("w"))
@click.option(
    "--gff-type",
    type=click.Choice(["gtf", "gff3"]),
    help="Input GFF dialect (default: from the file extension).",
)
@click.option("--loose-codons", is_flag=True, help="Tolerate transcripts with a single codon.")
@click.option("--seq-name-prefix", help="Prefix added to every sequence name.")
@click.option("--seq-name-lstrip", help="Leading string removed from sequence names.")
@click.pass_context
def gff_to_refflat(
    ctx: click.Context,
    input_file: IO[str],
    output_file: IO[str],
    gff_type: str | None,
    loose_codons: bool,
    seq_name_prefix: str | None,
    seq_name_lstrip: str | None,
) -> None:
    """Convert a GTF or GFF3 file to refFlat.

    INPUT and OUTPUT may be '-' for stdin and stdout.
    """
    config: Config = ctx.obj["config"]
    io_config = config.io

    reader = GffReader(
        input_file,
        _resolve_gff_type(gff_type, config, input_file),
        gene_id_attr=io_config.gene_id_attr,
        transcript_id_attr=io_config.transcript_id_attr,
        seq_name_prefix=seq_name_prefix if seq_name_prefix is not None else io_config.seq_name_prefix,
        seq_name_lstrip=seq_name_lstrip if seq_name_lstrip is not None else io_config.seq_name_lstrip,
        loose_codons=loose_codons or io_config.loose_codons,
        strict=io_config.strict,
        max_lookback=config.inference.max_lookback,
    )

    try:
        with Timer("GFF to refFlat conversion", logger), RefFlatWriter(output_file) as writer:
            for transcript in reader.iter_transcripts():
                writer.write_transcript(transcript)
    except GteError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    _report(ctx, writer.n_written, reader.n_skipped, "transcript(s)")


# =============================================================================
# refflat-to-gff command
# =============================================================================


@main.command("refflat-to-gff")
@click.argument("input_file", metavar="INPUT", type=click.File("r"))
@click.argument("output_file", metavar="OUTPUT", type=click.File("w"))
@click.option(
    "--gff-type",
    type=click.Choice(["gtf", "gff3"]),
    help="Output GFF dialect (default: gtf).",
)
@click.option("--source", default="gtetools", show_default=True, help="Value of the source column.")
@click.option("--seq-name-prefix", help="Prefix added to every sequence name.")
@click.option("--seq-name-lstrip", help="Leading string removed from sequence names.")
@click.pass_context
def refflat_to_gff(
    ctx: click.Context,
    input_file: IO[str],
    output_file: IO[str],
    gff_type: str | None,
    source: str,
    seq_name_prefix: str | None,
    seq_name_lstrip: str | None,
) -> None:
    """Convert a refFlat file to GTF or GFF3 with inferred exon features.

    INPUT and OUTPUT may be '-' for stdin and stdout.
    """
    config: Config = ctx.obj["config"]
    io_config = config.io

    reader = RefFlatReader(
        input_file,
        seq_name_prefix=seq_name_prefix if seq_name_prefix is not None else io_config.seq_name_prefix,
        seq_name_lstrip=seq_name_lstrip if seq_name_lstrip is not None else io_config.seq_name_lstrip,
        strict=io_config.strict,
        max_lookback=config.inference.max_lookback,
    )
    output_type = GffType(gff_type or io_config.gff_type or GffType.GTF.value)

    n_genes = 0
    try:
        with Timer("refFlat to GFF conversion", logger), GffWriter(output_file, output_type, source) as writer:
            writer.write_header()
            for gene in reader.iter_genes():
                writer.write_gene(gene)
                n_genes += 1
    except GteError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    _report(ctx, n_genes, reader.n_skipped, "gene(s)")


# =============================================================================
# stats command
# =============================================================================


def _infer_format(handle: IO[str]) -> str:
    suffix = Path(getattr(handle, "name", "")).suffix.lower()
    if suffix == ".gtf":
        return "gtf"
    if suffix in (".gff", ".gff3"):
        return "gff3"
    return "refflat"


def _stats_table(stats: AnnotationStats) -> Table:
    table = Table(title="Annotation statistics")
    table.add_column("Metric")
    table.add_column("Count", justify="right")
    table.add_column("Mean", justify="right")
    table.add_column("Median", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("Max", justify="right")

    table.add_row("Genes", str(stats.n_genes), "", "", "", "")
    table.add_row("Transcripts", str(stats.n_transcripts), "", "", "", "")
    table.add_row("Coding transcripts", str(stats.n_coding_transcripts), "", "", "", "")
    for char, count in stats.strand_counts.items():
        table.add_row(f"Transcripts on strand {char}", str(count), "", "", "", "")

    summaries = [
        ("Transcripts per gene", stats.transcripts_per_gene),
        ("Exons per transcript", stats.exons_per_transcript),
        ("Transcript length", stats.transcript_lengths),
        ("CDS length", stats.cds_lengths),
        ("Exon length", stats.exon_lengths),
        ("Intron length", stats.intron_lengths),
    ]
    for label, summary in summaries:
        if summary.count == 0:
            table.add_row(label, "0", "-", "-", "-", "-")
            continue
        table.add_row(
            label,
            str(summary.count),
            f"{summary.mean:.1f}",
            f"{summary.median:.1f}",
            str(summary.min),
            str(summary.max),
        )

    table.add_row("Exon footprint (bp)", str(stats.exon_footprint), "", "", "", "")
    return table


@main.command()
@click.argument("input_file", metavar="INPUT", type=click.File("r"))
@click.option(
    "--format",
    "input_format",
    type=click.Choice(["refflat", "gtf", "gff3"]),
    help="Input format (default: from the file extension, else refflat).",
)
@click.option("--json", "as_json", is_flag=True, help="Print statistics as JSON.")
@click.pass_context
def stats(ctx: click.Context, input_file: IO[str], input_format: str | None, as_json: bool) -> None:
    """Summarize an annotation file.

    INPUT may be '-' for stdin.
    """
    config: Config = ctx.obj["config"]
    io_config = config.io
    input_format = input_format or _infer_format(input_file)

    if input_format == "refflat":
        reader: RefFlatReader | GffReader = RefFlatReader(
            input_file,
            seq_name_prefix=io_config.seq_name_prefix,
            seq_name_lstrip=io_config.seq_name_lstrip,
            strict=io_config.strict,
            max_lookback=config.inference.max_lookback,
        )
    else:
        reader = GffReader(
            input_file,
            GffType(input_format),
            gene_id_attr=io_config.gene_id_attr,
            transcript_id_attr=io_config.transcript_id_attr,
            seq_name_prefix=io_config.seq_name_prefix,
            seq_name_lstrip=io_config.seq_name_lstrip,
            loose_codons=io_config.loose_codons,
            strict=io_config.strict,
            max_lookback=config.inference.max_lookback,
        )

    try:
        result = collect_stats(reader.iter_genes())
    except GteError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        Console().print(_stats_table(result))

    if reader.n_skipped and not ctx.obj.get("quiet"):
        console.print(f"[yellow]Skipped {reader.n_skipped} malformed record(s)[/yellow]")


if __name__ == "__main__":
    main()
