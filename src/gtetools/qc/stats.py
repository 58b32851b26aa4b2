"""Summary statistics for gene annotations.

Example:
    >>> from gtetools.io.refflat import read_refflat
    >>> from gtetools.qc.stats import collect_stats
    >>> stats = collect_stats(read_refflat("annotation.refFlat"))
    >>> stats.n_coding_transcripts
    42
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import attrs
import numpy as np

from gtetools.core.models import Gene
from gtetools.core.strand import Strand
from gtetools.utils.intervals import total_length

logger = logging.getLogger(__name__)


@attrs.define(slots=True)
class LengthSummary:
    """Distribution summary of a set of lengths."""

    count: int = 0
    total: int = 0
    mean: float | None = None
    median: float | None = None
    min: int | None = None
    max: int | None = None

    @classmethod
    def from_values(cls, values: list[int]) -> LengthSummary:
        if not values:
            return cls()
        arr = np.asarray(values, dtype=np.int64)
        return cls(
            count=int(arr.size),
            total=int(arr.sum()),
            mean=float(np.mean(arr)),
            median=float(np.median(arr)),
            min=int(arr.min()),
            max=int(arr.max()),
        )


@attrs.define(slots=True)
class AnnotationStats:
    """Counts and length distributions of an annotation.

    Attributes:
        n_genes: Number of genes.
        n_transcripts: Number of transcripts.
        n_coding_transcripts: Number of transcripts with a CDS.
        n_exons: Number of exons across all transcripts.
        strand_counts: Transcripts per strand character.
        transcripts_per_gene: Summary of transcript counts per gene.
        exons_per_transcript: Summary of exon counts per transcript.
        transcript_lengths: Spliced transcript lengths.
        cds_lengths: CDS lengths of coding transcripts, stop codon excluded.
        exon_lengths: Exon lengths.
        intron_lengths: Intron lengths.
        exon_footprint: Genomic bases covered by at least one exon.
    """

    n_genes: int = 0
    n_transcripts: int = 0
    n_coding_transcripts: int = 0
    n_exons: int = 0
    strand_counts: dict[str, int] = attrs.Factory(lambda: {strand.char: 0 for strand in Strand})
    transcripts_per_gene: LengthSummary = attrs.Factory(LengthSummary)
    exons_per_transcript: LengthSummary = attrs.Factory(LengthSummary)
    transcript_lengths: LengthSummary = attrs.Factory(LengthSummary)
    cds_lengths: LengthSummary = attrs.Factory(LengthSummary)
    exon_lengths: LengthSummary = attrs.Factory(LengthSummary)
    intron_lengths: LengthSummary = attrs.Factory(LengthSummary)
    exon_footprint: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return attrs.asdict(self)


def collect_stats(genes: Iterable[Gene]) -> AnnotationStats:
    """Gather statistics over genes.

    Args:
        genes: Genes to summarize; consumed once.

    Returns:
        AnnotationStats for all genes.
    """
    stats = AnnotationStats()
    transcripts_per_gene = []
    exons_per_transcript = []
    transcript_lengths = []
    cds_lengths = []
    exon_lengths = []
    intron_lengths = []
    exons_by_seq: dict[str, list[tuple[int, int]]] = {}

    for gene in genes:
        stats.n_genes += 1
        transcripts_per_gene.append(gene.n_transcripts)

        for transcript in gene.transcripts.values():
            stats.n_transcripts += 1
            stats.strand_counts[transcript.strand.char] += 1
            stats.n_exons += transcript.n_exons
            exons_per_transcript.append(transcript.n_exons)
            transcript_lengths.append(transcript.spliced_length)
            exon_lengths.extend(exon.span for exon in transcript.exons)
            intron_lengths.extend(intron.length for intron in transcript.introns)
            exons_by_seq.setdefault(transcript.seq_name, []).extend(transcript.exon_coords)

            if transcript.is_coding:
                stats.n_coding_transcripts += 1
                cds_lengths.append(transcript.cds_length)

    stats.transcripts_per_gene = LengthSummary.from_values(transcripts_per_gene)
    stats.exons_per_transcript = LengthSummary.from_values(exons_per_transcript)
    stats.transcript_lengths = LengthSummary.from_values(transcript_lengths)
    stats.cds_lengths = LengthSummary.from_values(cds_lengths)
    stats.exon_lengths = LengthSummary.from_values(exon_lengths)
    stats.intron_lengths = LengthSummary.from_values(intron_lengths)
    stats.exon_footprint = sum(total_length(coords) for coords in exons_by_seq.values())

    logger.debug(f"Collected statistics for {stats.n_genes} gene(s), {stats.n_transcripts} transcript(s)")
    return stats
