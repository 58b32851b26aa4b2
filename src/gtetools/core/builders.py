"""Builders for exons, transcripts and genes.

Builders collect raw inputs (coordinates, strand character, identifiers) and
validate them in ``build()``, returning the immutable-by-convention models in
``gtetools.core.models``. ``TranscriptBuilder`` is the entry point to the
feature inference engine: given exon coordinates and an optional coding
region it annotates every exon and assigns reading frames.

Example:
    >>> from gtetools.core.builders import GeneBuilder
    >>> gene = GeneBuilder(
    ...     "chr1", 100, 1000, strand_char="-", id="gene1",
    ...     transcript_coords={
    ...         "tx1": ((100, 1000), [(100, 300), (700, 1000)], (200, 800)),
    ...     },
    ... ).build()
    >>> gene.transcripts["tx1"].n_exons
    2
"""

from __future__ import annotations

import logging

import attrs

from gtetools.core.frames import assign_frames
from gtetools.core.inference import infer_exons
from gtetools.core.models import Exon, ExonFeature, Gene, Transcript
from gtetools.core.strand import Strand, resolve_strand
from gtetools.exceptions import FeatureError, TranscriptNotFullyEnveloped, UnspecifiedExons
from gtetools.utils.intervals import Interval

logger = logging.getLogger(__name__)

Coord = tuple[int, int]

# (transcript coordinates, exon coordinates, coding coordinates or None)
RawTranscriptCoord = tuple[Coord, list[Coord], Coord | None]


@attrs.define(slots=True)
class ExonBuilder:
    """Builder for hand-made exons.

    Attributes:
        seq_name: Reference sequence name.
        start: Exon start (0-based).
        end: Exon end (exclusive).
        strand: Strand value.
        strand_char: Strand character; must agree with ``strand`` if both
            are given.
        id: Exon identifier.
        transcript_id: Parent transcript identifier.
        gene_id: Parent gene identifier.
        attributes: Free-form attributes.
        features: Sub-exon features.
    """

    seq_name: str
    start: int
    end: int
    strand: Strand | None = None
    strand_char: str | None = None
    id: str | None = None
    transcript_id: str | None = None
    gene_id: str | None = None
    attributes: dict[str, str] = attrs.Factory(dict)
    features: list[ExonFeature] = attrs.Factory(list)

    def build(self) -> Exon:
        """Validate the inputs and create the exon.

        Raises:
            FeatureError: On an invalid interval or strand input.
        """
        try:
            interval = Interval.from_coords(self.start, self.end)
            strand = resolve_strand(self.strand, self.strand_char)
        except FeatureError as e:
            raise e.with_transcript_id(self.transcript_id)
        return Exon(
            seq_name=self.seq_name,
            interval=interval,
            strand=strand,
            id=self.id,
            transcript_id=self.transcript_id,
            gene_id=self.gene_id,
            attributes=dict(self.attributes),
            features=list(self.features),
        )


@attrs.define(slots=True)
class TranscriptBuilder:
    """Builder for transcripts.

    Exons are given either pre-built (``exons``, used as-is) or as
    coordinates (``exon_coords`` with optional ``coding_coord``), in which
    case UTR, CDS and codon features are inferred and frames assigned.

    Attributes:
        seq_name: Reference sequence name.
        start: Transcript start (0-based).
        end: Transcript end (exclusive).
        strand: Strand value.
        strand_char: Strand character.
        transcript_id: Transcript identifier.
        gene_id: Parent gene identifier.
        attributes: Free-form attributes.
        exons: Pre-built exons; take precedence over coordinates.
        exon_coords: Exon (start, end) coordinates.
        coding_coord: Coding region (start, end).
        coding_incl_stop: Whether ``coding_coord`` includes the stop codon.
        max_lookback: Backtracking limit passed to the inference engine.
    """

    seq_name: str
    start: int
    end: int
    strand: Strand | None = None
    strand_char: str | None = None
    transcript_id: str | None = None
    gene_id: str | None = None
    attributes: dict[str, str] = attrs.Factory(dict)
    exons: list[Exon] | None = None
    exon_coords: list[Coord] | None = None
    coding_coord: Coord | None = None
    coding_incl_stop: bool = False
    max_lookback: int | None = None

    def build(self) -> Transcript:
        """Validate the inputs, infer exon features and create the transcript.

        Returns:
            The built transcript.

        Raises:
            FeatureError: On any invalid input; the transcript identifier is
                attached to the error.
        """
        try:
            interval = Interval.from_coords(self.start, self.end)
            strand = resolve_strand(self.strand, self.strand_char)
            exons = self._resolve_exons(interval, strand)
        except FeatureError as e:
            raise e.with_transcript_id(self.transcript_id)

        return Transcript(
            seq_name=self.seq_name,
            interval=interval,
            strand=strand,
            id=self.transcript_id,
            gene_id=self.gene_id,
            attributes=dict(self.attributes),
            exons=exons,
        )

    def _resolve_exons(self, interval: Interval, strand: Strand) -> list[Exon]:
        if self.exons:
            return list(self.exons)

        if self.exon_coords is None:
            if self.coding_coord is not None:
                raise UnspecifiedExons()
            return []

        exons = infer_exons(
            self.seq_name,
            interval,
            strand,
            self.exon_coords,
            coding_coord=self.coding_coord,
            coding_incl_stop=self.coding_incl_stop,
            transcript_id=self.transcript_id,
            gene_id=self.gene_id,
            max_lookback=self.max_lookback,
        )
        assign_frames(exons, strand)
        return exons


@attrs.define(slots=True)
class GeneBuilder:
    """Builder for genes.

    Transcripts are given either pre-built (``transcripts``) or as raw
    coordinates (``transcript_coords``), keyed by transcript identifier.

    Attributes:
        seq_name: Reference sequence name.
        start: Gene start (0-based).
        end: Gene end (exclusive).
        strand: Strand value.
        strand_char: Strand character.
        id: Gene identifier.
        attributes: Free-form attributes.
        transcripts: Pre-built transcripts; take precedence over coordinates.
        transcript_coords: Mapping of transcript identifier to
            (transcript coordinates, exon coordinates, coding coordinates).
        transcript_coding_incl_stop: Whether the coding coordinates include
            the stop codon.
        max_lookback: Backtracking limit passed to the inference engine.
    """

    seq_name: str
    start: int
    end: int
    strand: Strand | None = None
    strand_char: str | None = None
    id: str | None = None
    attributes: dict[str, str] = attrs.Factory(dict)
    transcripts: dict[str, Transcript] | None = None
    transcript_coords: dict[str, RawTranscriptCoord] | None = None
    transcript_coding_incl_stop: bool = False
    max_lookback: int | None = None

    def build(self) -> Gene:
        """Validate the inputs, build transcripts and create the gene.

        Raises:
            FeatureError: On invalid gene input or any transcript failure.
        """
        interval = Interval.from_coords(self.start, self.end)
        strand = resolve_strand(self.strand, self.strand_char)

        return Gene(
            seq_name=self.seq_name,
            interval=interval,
            strand=strand,
            id=self.id,
            attributes=dict(self.attributes),
            transcripts=self._resolve_transcripts(interval, strand),
        )

    def _resolve_transcripts(self, interval: Interval, strand: Strand) -> dict[str, Transcript]:
        if self.transcripts is not None:
            for transcript_id, transcript in self.transcripts.items():
                if not interval.envelops(transcript.interval):
                    raise TranscriptNotFullyEnveloped(transcript_id=transcript_id)
            return dict(self.transcripts)
        if self.transcript_coords is None:
            return {}

        transcripts = {}
        for transcript_id, (tx_coord, exon_coords, coding_coord) in self.transcript_coords.items():
            tx_start, tx_end = tx_coord
            if not interval.envelops(Interval(tx_start, tx_end)):
                raise TranscriptNotFullyEnveloped(transcript_id=transcript_id)

            transcripts[transcript_id] = TranscriptBuilder(
                self.seq_name,
                tx_start,
                tx_end,
                strand=strand,
                transcript_id=transcript_id,
                gene_id=self.id,
                exon_coords=list(exon_coords),
                coding_coord=coding_coord,
                coding_incl_stop=self.transcript_coding_incl_stop,
                max_lookback=self.max_lookback,
            ).build()

        logger.debug(f"Built {len(transcripts)} transcript(s) for gene {self.id}")
        return transcripts
