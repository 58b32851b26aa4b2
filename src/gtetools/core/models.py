"""Annotation data models.

This module defines the gene annotation hierarchy produced by gtetools:

    Gene -> Transcript -> Exon -> ExonFeature

Instances are created by the builders in ``gtetools.core.builders`` (or by
the inference engine) and are treated as immutable afterwards; the only
in-place update is the frame pass, which stamps ``ExonFeature.frame`` once
right after inference.

Coordinates are 0-based, half-open.

Example:
    >>> from gtetools.core.builders import TranscriptBuilder
    >>> tx = TranscriptBuilder(
    ...     "chr1", 100, 1000, strand_char="+", transcript_id="tx1",
    ...     exon_coords=[(100, 300), (400, 500), (700, 1000)],
    ...     coding_coord=(150, 210),
    ... ).build()
    >>> tx.coding_coord(incl_stop=False)
    (150, 210)
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum

import attrs

from gtetools.core.strand import Strand
from gtetools.utils.intervals import Interval, interval_gaps

# =============================================================================
# Feature Kinds
# =============================================================================


class FeatureKind(Enum):
    """Kind of an exon sub-interval."""

    UTR = "UTR"  # untranslated, strand unknown
    UTR5 = "UTR5"
    UTR3 = "UTR3"
    CDS = "CDS"
    START_CODON = "start_codon"
    STOP_CODON = "stop_codon"
    OTHER = "other"  # free-form, named by ExonFeature.tag

    @property
    def is_utr(self) -> bool:
        """True for UTR, UTR5 and UTR3."""
        return self in (FeatureKind.UTR, FeatureKind.UTR5, FeatureKind.UTR3)

    @property
    def is_codon(self) -> bool:
        """True for start and stop codons."""
        return self in (FeatureKind.START_CODON, FeatureKind.STOP_CODON)

    @property
    def takes_frame(self) -> bool:
        """True for kinds that carry a reading frame."""
        return self is FeatureKind.CDS or self.is_codon


# =============================================================================
# Data Models
# =============================================================================


def _check_frame(instance: ExonFeature, attribute: attrs.Attribute, value: int | None) -> None:
    if value is None:
        return
    if not instance.kind.takes_frame:
        raise ValueError(f"{instance.kind.value} features do not carry a frame")
    if value not in (0, 1, 2):
        raise ValueError(f"frame must be 0, 1 or 2, got {value}")


@attrs.define(slots=True)
class ExonFeature:
    """A sub-interval of an exon.

    Attributes:
        interval: Feature coordinates.
        kind: Feature kind.
        frame: Reading frame (0, 1 or 2) for CDS and codon features, set by
            the frame pass.
        tag: Feature name for OTHER features.
    """

    interval: Interval
    kind: FeatureKind
    frame: int | None = attrs.field(default=None, validator=_check_frame)
    tag: str | None = None

    @property
    def start(self) -> int:
        return self.interval.start

    @property
    def end(self) -> int:
        return self.interval.end

    @property
    def span(self) -> int:
        return self.interval.length

    @property
    def name(self) -> str:
        """Feature type name, using the tag for OTHER features."""
        if self.kind is FeatureKind.OTHER and self.tag:
            return self.tag
        return self.kind.value


@attrs.define(slots=True)
class Exon:
    """An exon and its sub-exon features.

    Attributes:
        seq_name: Reference sequence name.
        interval: Exon coordinates.
        strand: Exon strand.
        id: Exon identifier.
        transcript_id: Parent transcript identifier.
        gene_id: Parent gene identifier.
        attributes: Free-form attributes.
        features: Sub-exon features, sorted by start.
    """

    seq_name: str
    interval: Interval
    strand: Strand
    id: str | None = None
    transcript_id: str | None = None
    gene_id: str | None = None
    attributes: dict[str, str] = attrs.Factory(dict)
    features: list[ExonFeature] = attrs.Factory(list)

    @property
    def start(self) -> int:
        return self.interval.start

    @property
    def end(self) -> int:
        return self.interval.end

    @property
    def span(self) -> int:
        return self.interval.length

    @property
    def coord(self) -> tuple[int, int]:
        """Exon coordinates as a plain tuple."""
        return (self.interval.start, self.interval.end)

    def features_of(self, *kinds: FeatureKind) -> list[ExonFeature]:
        """Get the features of the given kinds, in stored order."""
        return [fx for fx in self.features if fx.kind in kinds]


@attrs.define(slots=True)
class Transcript:
    """A transcript with its exons.

    Attributes:
        seq_name: Reference sequence name.
        interval: Transcript coordinates; equals the envelope of its exons.
        strand: Transcript strand.
        id: Transcript identifier.
        gene_id: Parent gene identifier.
        attributes: Free-form attributes.
        exons: Exons, sorted by start.
    """

    seq_name: str
    interval: Interval
    strand: Strand
    id: str | None = None
    gene_id: str | None = None
    attributes: dict[str, str] = attrs.Factory(dict)
    exons: list[Exon] = attrs.Factory(list)

    @property
    def start(self) -> int:
        return self.interval.start

    @property
    def end(self) -> int:
        return self.interval.end

    @property
    def span(self) -> int:
        return self.interval.length

    @property
    def n_exons(self) -> int:
        """Number of exons."""
        return len(self.exons)

    @property
    def exon_coords(self) -> list[tuple[int, int]]:
        """Exon coordinates as plain tuples."""
        return [exon.coord for exon in self.exons]

    @property
    def introns(self) -> list[Interval]:
        """Gaps between consecutive exons."""
        return interval_gaps(self.exon_coords)

    @property
    def spliced_length(self) -> int:
        """Total exon length."""
        return sum(exon.span for exon in self.exons)

    @property
    def cds_length(self) -> int:
        """Total CDS length, excluding the stop codon."""
        return sum(fx.span for fx in self.iter_features() if fx.kind is FeatureKind.CDS)

    @property
    def is_coding(self) -> bool:
        """True if any exon carries a CDS feature."""
        return any(fx.kind is FeatureKind.CDS for fx in self.iter_features())

    def iter_features(self) -> Iterator[ExonFeature]:
        """Iterate over all exon features in genomic order."""
        for exon in self.exons:
            yield from exon.features

    def coding_coord(self, incl_stop: bool = False) -> tuple[int, int] | None:
        """Recover the coding region from the annotated exons.

        The region is bounded by the CDS. With ``incl_stop`` the 3' bound is
        moved to the outer edge of the stop codon, which may lie across an
        intron. Transcripts of unknown strand have no stop codon and are
        bounded by their CDS either way.

        Args:
            incl_stop: Include the stop codon in the returned region.

        Returns:
            (start, end) of the coding region, or None if the transcript is
            not coding or lacks a codon.
        """
        cds = [fx.interval for fx in self.iter_features() if fx.kind is FeatureKind.CDS]
        if not cds:
            return None
        start, end = min(iv.start for iv in cds), max(iv.end for iv in cds)
        if not self.strand.is_stranded:
            return (start, end)

        starts = [fx.interval for fx in self.iter_features() if fx.kind is FeatureKind.START_CODON]
        stops = [fx.interval for fx in self.iter_features() if fx.kind is FeatureKind.STOP_CODON]
        if not starts or not stops:
            return None

        if incl_stop and self.strand is Strand.FORWARD:
            end = max(iv.end for iv in stops)
        elif incl_stop:
            start = min(iv.start for iv in stops)
        return (start, end)


@attrs.define(slots=True)
class Gene:
    """A gene with its transcripts.

    Attributes:
        seq_name: Reference sequence name.
        interval: Gene coordinates; envelops every transcript.
        strand: Gene strand.
        id: Gene identifier.
        attributes: Free-form attributes.
        transcripts: Transcripts keyed by identifier, in insertion order.
    """

    seq_name: str
    interval: Interval
    strand: Strand
    id: str | None = None
    attributes: dict[str, str] = attrs.Factory(dict)
    transcripts: dict[str, Transcript] = attrs.Factory(dict)

    @property
    def start(self) -> int:
        return self.interval.start

    @property
    def end(self) -> int:
        return self.interval.end

    @property
    def span(self) -> int:
        return self.interval.length

    @property
    def n_transcripts(self) -> int:
        """Number of transcripts."""
        return len(self.transcripts)
