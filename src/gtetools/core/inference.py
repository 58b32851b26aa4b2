"""Exon feature inference.

This module turns the raw coordinates of a transcript (exon spans, strand
and an optional coding region) into exons annotated with UTR, CDS, start
codon and stop codon features.

Each exon is classified against the coding region into one of the
``ExonPosition`` cases, and the case decides which features the exon
receives. Codons that do not fit into a single exon are split:

- Forward strand: codon bases spill over into the following exons.
- Reverse strand: the engine backtracks over exons it has already emitted
  and appends the missing bases to their 3' ends (genomic end).

UTR features and CDS features tile each exon; codon features overlay them.
On the forward strand the stop codon lies after the CDS end and overlaps the
3' UTR; on the reverse strand it lies before the CDS start and overlaps the
3' UTR on the low-coordinate side.

Example:
    >>> from gtetools.core.inference import infer_exons
    >>> from gtetools.core.strand import Strand
    >>> from gtetools.utils.intervals import Interval
    >>> exons = infer_exons(
    ...     "chr1", Interval(100, 1000), Strand.FORWARD,
    ...     [(100, 300), (400, 500), (700, 1000)], coding_coord=(150, 210),
    ... )
    >>> [(fx.start, fx.end, fx.kind.value) for fx in exons[0].features]
    [(100, 150, 'UTR5'), (150, 153, 'start_codon'), (150, 210, 'CDS'), (210, 213, 'stop_codon'), (210, 300, 'UTR3')]
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum

from gtetools.core.frames import CODON_LENGTH
from gtetools.core.models import Exon, ExonFeature, FeatureKind
from gtetools.core.strand import Strand
from gtetools.exceptions import (
    AmbiguousStopCodon,
    CodingInIntron,
    CodingNotFullyEnveloped,
    CodingTooLarge,
    CodingTooSmall,
    IncompleteCodon,
    InvalidCodingInterval,
    InvalidExonInterval,
    UnclassifiableExon,
    UnmatchedExons,
    UnspecifiedExons,
)
from gtetools.utils.intervals import Interval, envelope

logger = logging.getLogger(__name__)

Coord = tuple[int, int]

# UTR kind on the low-coordinate and high-coordinate side of the coding region
_UTR_KINDS = {
    Strand.FORWARD: (FeatureKind.UTR5, FeatureKind.UTR3),
    Strand.REVERSE: (FeatureKind.UTR3, FeatureKind.UTR5),
    Strand.UNKNOWN: (FeatureKind.UTR, FeatureKind.UTR),
}


# =============================================================================
# Exon Classification
# =============================================================================


class ExonPosition(Enum):
    """Position of an exon relative to the coding region [cs, ce)."""

    UPSTREAM = "upstream"  # end < cs
    ABUTS_CODING_START = "abuts_coding_start"  # end == cs
    SPANS_CODING_START = "spans_coding_start"  # start < cs < end < ce
    SPANS_CODING_START_TO_END = "spans_coding_start_to_end"  # start < cs, end == ce
    SPANS_CODING = "spans_coding"  # start < cs, end > ce
    STARTS_AT_CODING_START = "starts_at_coding_start"  # start == cs, end < ce
    MATCHES_CODING = "matches_coding"  # start == cs, end == ce
    STARTS_AT_CODING_START_SPANS_END = "starts_at_coding_start_spans_end"  # start == cs, end > ce
    INTERNAL = "internal"  # cs < start, end < ce
    ENDS_AT_CODING_END = "ends_at_coding_end"  # cs < start < ce, end == ce
    SPANS_CODING_END = "spans_coding_end"  # cs < start < ce < end
    DOWNSTREAM = "downstream"  # start >= ce


def classify_exon(start: int, end: int, coding_start: int, coding_end: int) -> ExonPosition:
    """Classify an exon against a coding region.

    Args:
        start: Exon start.
        end: Exon end.
        coding_start: Coding region start.
        coding_end: Coding region end.

    Returns:
        The exon position.

    Raises:
        UnclassifiableExon: If either interval is empty or inverted.
    """
    if start >= end or coding_start >= coding_end:
        raise UnclassifiableExon((start, end), (coding_start, coding_end))

    if start < coding_start:
        if end < coding_start:
            return ExonPosition.UPSTREAM
        if end == coding_start:
            return ExonPosition.ABUTS_CODING_START
        if end < coding_end:
            return ExonPosition.SPANS_CODING_START
        if end == coding_end:
            return ExonPosition.SPANS_CODING_START_TO_END
        return ExonPosition.SPANS_CODING

    if start == coding_start:
        if end < coding_end:
            return ExonPosition.STARTS_AT_CODING_START
        if end == coding_end:
            return ExonPosition.MATCHES_CODING
        return ExonPosition.STARTS_AT_CODING_START_SPANS_END

    if start < coding_end:
        if end < coding_end:
            return ExonPosition.INTERNAL
        if end == coding_end:
            return ExonPosition.ENDS_AT_CODING_END
        return ExonPosition.SPANS_CODING_END

    return ExonPosition.DOWNSTREAM


# =============================================================================
# Coding Region Adjustment
# =============================================================================


def adjust_coding_coord(coding: Coord, strand: Strand, exon_coords: list[Coord]) -> Coord:
    """Trim the stop codon off a stop-inclusive coding region.

    The three 3'-most coding bases are removed, walking from the 3' end of
    the coding region towards its 5' end and jumping over introns when an
    exon holds fewer than three bases. Coordinates that do not fall inside
    an exon are returned untouched so that validation can reject them.

    Args:
        coding: Stop-inclusive (start, end) coding region.
        strand: Transcript strand; unknown strands are not trimmed.
        exon_coords: Exon coordinates sorted by start.

    Returns:
        The (start, end) coding region without the stop codon.
    """
    start, end = coding
    remaining = CODON_LENGTH
    crossing = False

    if strand is Strand.FORWARD:
        for exon_start, exon_end in reversed(exon_coords):
            if crossing:
                end = exon_end
            elif not exon_start <= end <= exon_end:
                continue
            taken = min(remaining, end - exon_start)
            end -= taken
            remaining -= taken
            if remaining == 0:
                break
            crossing = True

    elif strand is Strand.REVERSE:
        for exon_start, exon_end in exon_coords:
            if crossing:
                start = exon_start
            elif not exon_start <= start <= exon_end:
                continue
            taken = min(remaining, exon_end - start)
            start += taken
            remaining -= taken
            if remaining == 0:
                break
            crossing = True

    return (start, end)


# =============================================================================
# Validation
# =============================================================================


def _validate_coding(
    coding: Coord,
    exon_coords: list[Coord],
    exon_range: Interval,
    strand: Strand,
    transcript_id: str | None,
) -> None:
    """Check a coding region against sorted exon coordinates."""
    coding_start, coding_end = coding

    if coding_start >= coding_end:
        raise InvalidCodingInterval(transcript_id=transcript_id)

    if coding_start < exon_range.start or coding_end > exon_range.end:
        raise CodingNotFullyEnveloped(transcript_id=transcript_id)

    start_in_exon = any(s <= coding_start <= e for s, e in exon_coords)
    end_in_exon = any(s <= coding_end <= e for s, e in exon_coords)
    if not (start_in_exon and end_in_exon):
        raise CodingInIntron(transcript_id=transcript_id)

    room_after = coding_end + CODON_LENGTH <= exon_range.end
    room_before = coding_start - CODON_LENGTH >= exon_range.start
    if strand is Strand.FORWARD:
        stop_codon_ok = room_after
    elif strand is Strand.REVERSE:
        stop_codon_ok = room_before
    else:
        stop_codon_ok = room_after and room_before
    if not stop_codon_ok:
        raise CodingTooLarge(transcript_id=transcript_id)

    # The exonic part of the coding region must fit the start codon
    coding_bases = sum(max(0, min(e, coding_end) - max(s, coding_start)) for s, e in exon_coords)
    if coding_bases < CODON_LENGTH:
        raise CodingTooSmall(transcript_id=transcript_id)


# =============================================================================
# Feature Emission
# =============================================================================


class _FeatureEmitter:
    """Emits annotated exons for one transcript, left to right.

    Emitted exons are kept in an output list; backtracking appends codon
    pieces to earlier entries of that list by index.
    """

    def __init__(
        self,
        seq_name: str,
        strand: Strand,
        coding: Coord,
        transcript_id: str | None = None,
        gene_id: str | None = None,
        max_lookback: int | None = None,
    ) -> None:
        self.seq_name = seq_name
        self.strand = strand
        self.coding_start, self.coding_end = coding
        self.transcript_id = transcript_id
        self.gene_id = gene_id
        self.max_lookback = max_lookback
        self.utr_low, self.utr_high = _UTR_KINDS[strand]
        self.remaining = {
            FeatureKind.START_CODON: CODON_LENGTH,
            FeatureKind.STOP_CODON: CODON_LENGTH,
        }
        self.exons: list[Exon] = []

    # -------------------------------------------------------------------------
    # Codon placement
    # -------------------------------------------------------------------------

    def _extend_codon(self, features: list[ExonFeature], kind: FeatureKind, start: int, limit: int) -> None:
        """Place pending codon bases rightwards from start, up to limit."""
        remaining = self.remaining[kind]
        if remaining == 0 or start >= limit:
            return
        end = min(limit, start + remaining)
        features.append(_feature(start, end, kind))
        self.remaining[kind] -= end - start

    def _close_codon(self, features: list[ExonFeature], kind: FeatureKind, end: int, floor: int) -> None:
        """Place pending codon bases leftwards ending at end, then backtrack."""
        remaining = self.remaining[kind]
        if remaining > 0 and end > floor:
            start = max(floor, end - remaining)
            features.append(_feature(start, end, kind))
            self.remaining[kind] -= end - start
        self._backtrack(kind)

    def _backtrack(self, kind: FeatureKind) -> None:
        """Place pending codon bases at the ends of already emitted exons."""
        remaining = self.remaining[kind]
        if remaining == 0:
            return

        lowest = 0
        if self.max_lookback is not None:
            lowest = max(0, len(self.exons) - self.max_lookback)

        # The start codon never leaves the coding region
        floor = self.coding_start if kind is FeatureKind.START_CODON else 0

        for index in range(len(self.exons) - 1, lowest - 1, -1):
            exon = self.exons[index]
            if remaining == 0 or exon.end <= floor:
                break
            start = max(exon.start, floor, exon.end - remaining)
            exon.features.append(_feature(start, exon.end, kind))
            remaining -= exon.end - start
            logger.debug(f"Backtracked {kind.value} into exon [{exon.start},{exon.end})")

        self.remaining[kind] = remaining

    # -------------------------------------------------------------------------
    # Exon emission
    # -------------------------------------------------------------------------

    def emit(self, start: int, end: int) -> None:
        """Classify one exon, annotate it and append it to the output."""
        position = classify_exon(start, end, self.coding_start, self.coding_end)
        features: list[ExonFeature] = []

        if self.strand is Strand.FORWARD:
            self._emit_forward(features, position, start, end)
        elif self.strand is Strand.REVERSE:
            self._emit_reverse(features, position, start, end)
        else:
            self._emit_unstranded(features, position, start, end)

        self.exons.append(
            Exon(
                seq_name=self.seq_name,
                interval=Interval(start, end),
                strand=self.strand,
                transcript_id=self.transcript_id,
                gene_id=self.gene_id,
                features=features,
            )
        )

    def _emit_forward(self, features: list[ExonFeature], position: ExonPosition, start: int, end: int) -> None:
        cs, ce = self.coding_start, self.coding_end
        start_codon, stop_codon = FeatureKind.START_CODON, FeatureKind.STOP_CODON
        P = ExonPosition

        if position in (P.UPSTREAM, P.ABUTS_CODING_START):
            features.append(_feature(start, end, self.utr_low))

        elif position is P.SPANS_CODING_START:
            features.append(_feature(start, cs, self.utr_low))
            self._extend_codon(features, start_codon, cs, end)
            features.append(_feature(cs, end, FeatureKind.CDS))

        elif position is P.SPANS_CODING_START_TO_END:
            features.append(_feature(start, cs, self.utr_low))
            self._extend_codon(features, start_codon, cs, ce)
            features.append(_feature(cs, ce, FeatureKind.CDS))

        elif position is P.SPANS_CODING:
            features.append(_feature(start, cs, self.utr_low))
            self._extend_codon(features, start_codon, cs, ce)
            features.append(_feature(cs, ce, FeatureKind.CDS))
            self._extend_codon(features, stop_codon, ce, end)
            features.append(_feature(ce, end, self.utr_high))

        elif position in (P.STARTS_AT_CODING_START, P.MATCHES_CODING, P.INTERNAL, P.ENDS_AT_CODING_END):
            self._extend_codon(features, start_codon, start, end)
            features.append(_feature(start, end, FeatureKind.CDS))

        elif position in (P.STARTS_AT_CODING_START_SPANS_END, P.SPANS_CODING_END):
            self._extend_codon(features, start_codon, start, ce)
            features.append(_feature(start, ce, FeatureKind.CDS))
            self._extend_codon(features, stop_codon, ce, end)
            features.append(_feature(ce, end, self.utr_high))

        elif position is P.DOWNSTREAM:
            self._extend_codon(features, stop_codon, start, end)
            features.append(_feature(start, end, self.utr_high))

    def _emit_reverse(self, features: list[ExonFeature], position: ExonPosition, start: int, end: int) -> None:
        cs, ce = self.coding_start, self.coding_end
        start_codon, stop_codon = FeatureKind.START_CODON, FeatureKind.STOP_CODON
        P = ExonPosition

        if position is P.UPSTREAM:
            features.append(_feature(start, end, self.utr_low))

        elif position is P.ABUTS_CODING_START:
            features.append(_feature(start, end, self.utr_low))
            self._close_codon(features, stop_codon, cs, start)

        elif position is P.SPANS_CODING_START:
            features.append(_feature(start, cs, self.utr_low))
            self._close_codon(features, stop_codon, cs, start)
            features.append(_feature(cs, end, FeatureKind.CDS))

        elif position in (P.SPANS_CODING_START_TO_END, P.SPANS_CODING):
            features.append(_feature(start, cs, self.utr_low))
            self._close_codon(features, stop_codon, cs, start)
            features.append(_feature(cs, ce, FeatureKind.CDS))
            self._close_codon(features, start_codon, ce, cs)
            if position is P.SPANS_CODING:
                features.append(_feature(ce, end, self.utr_high))

        elif position is P.STARTS_AT_CODING_START:
            self._backtrack(stop_codon)
            features.append(_feature(start, end, FeatureKind.CDS))

        elif position in (P.MATCHES_CODING, P.STARTS_AT_CODING_START_SPANS_END):
            self._backtrack(stop_codon)
            features.append(_feature(start, ce, FeatureKind.CDS))
            self._close_codon(features, start_codon, ce, start)
            if position is P.STARTS_AT_CODING_START_SPANS_END:
                features.append(_feature(ce, end, self.utr_high))

        elif position is P.INTERNAL:
            features.append(_feature(start, end, FeatureKind.CDS))

        elif position in (P.ENDS_AT_CODING_END, P.SPANS_CODING_END):
            features.append(_feature(start, ce, FeatureKind.CDS))
            self._close_codon(features, start_codon, ce, start)
            if position is P.SPANS_CODING_END:
                features.append(_feature(ce, end, self.utr_high))

        elif position is P.DOWNSTREAM:
            self._backtrack(start_codon)
            features.append(_feature(start, end, self.utr_high))

    def _emit_unstranded(self, features: list[ExonFeature], position: ExonPosition, start: int, end: int) -> None:
        # No codons without a known translation direction
        coding = Interval(max(start, self.coding_start), min(end, self.coding_end))
        if coding.start >= coding.end:
            features.append(_feature(start, end, FeatureKind.UTR))
            return
        if start < coding.start:
            features.append(_feature(start, coding.start, FeatureKind.UTR))
        features.append(_feature(coding.start, coding.end, FeatureKind.CDS))
        if coding.end < end:
            features.append(_feature(coding.end, end, FeatureKind.UTR))

    def finish(self) -> list[Exon]:
        """Check that both codons are complete and return sorted exons."""
        if self.strand.is_stranded:
            for kind, remaining in self.remaining.items():
                if remaining > 0:
                    raise IncompleteCodon(
                        f"{IncompleteCodon.description}: {remaining} base(s) of {kind.value} left unplaced",
                        transcript_id=self.transcript_id,
                    )
        for exon in self.exons:
            exon.features.sort(key=lambda fx: fx.start)
        return self.exons


def _feature(start: int, end: int, kind: FeatureKind) -> ExonFeature:
    return ExonFeature(interval=Interval(start, end), kind=kind)


# =============================================================================
# Public API
# =============================================================================


def infer_exons(
    seq_name: str,
    transcript_interval: Interval,
    strand: Strand,
    exon_coords: Iterable[Coord],
    coding_coord: Coord | None = None,
    coding_incl_stop: bool = False,
    *,
    transcript_id: str | None = None,
    gene_id: str | None = None,
    max_lookback: int | None = None,
) -> list[Exon]:
    """Build annotated exons from raw transcript coordinates.

    Frames are not assigned here; see ``gtetools.core.frames.assign_frames``.

    Args:
        seq_name: Reference sequence name.
        transcript_interval: Transcript coordinates; must equal the exon
            envelope.
        strand: Transcript strand.
        exon_coords: Exon (start, end) coordinates in any order.
        coding_coord: Coding region (start, end), or None for non-coding
            transcripts.
        coding_incl_stop: Whether ``coding_coord`` includes the stop codon.
        transcript_id: Transcript identifier, stamped on exons and errors.
        gene_id: Gene identifier, stamped on exons.
        max_lookback: Maximum number of emitted exons a reverse-strand codon
            may backtrack over; None for no limit.

    Returns:
        Exons sorted by start, each with features sorted by start.

    Raises:
        FeatureError: If the coordinates are inconsistent. No exons are
            returned on failure.
    """
    coords = [(int(start), int(end)) for start, end in exon_coords]
    if not coords:
        raise UnspecifiedExons(transcript_id=transcript_id)
    for start, end in coords:
        if start < 0 or start >= end:
            raise InvalidExonInterval(
                f"{InvalidExonInterval.description}: [{start},{end})", transcript_id=transcript_id
            )
    coords.sort()

    if coding_coord is not None and coding_incl_stop:
        if not strand.is_stranded:
            raise AmbiguousStopCodon(transcript_id=transcript_id)
        coding_coord = adjust_coding_coord(coding_coord, strand, coords)

    exon_range = envelope(coords)
    if exon_range != (transcript_interval.start, transcript_interval.end):
        raise UnmatchedExons(transcript_id=transcript_id)

    if coding_coord is None:
        return [
            Exon(
                seq_name=seq_name,
                interval=Interval(start, end),
                strand=strand,
                transcript_id=transcript_id,
                gene_id=gene_id,
            )
            for start, end in coords
        ]

    coding = (int(coding_coord[0]), int(coding_coord[1]))
    _validate_coding(coding, coords, exon_range, strand, transcript_id)

    emitter = _FeatureEmitter(seq_name, strand, coding, transcript_id, gene_id, max_lookback)
    for start, end in coords:
        emitter.emit(start, end)
    exons = emitter.finish()

    logger.debug(f"Inferred features for {len(exons)} exon(s), coding region [{coding[0]},{coding[1]})")
    return exons
