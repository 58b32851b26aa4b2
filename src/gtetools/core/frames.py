"""Reading-frame assignment for coding features.

The frame of a feature is the number of bases to skip from its 5' end before
the first complete codon begins (the GTF convention). Frames are carried
across exon boundaries with one running counter per feature kind: CDS,
start codon and stop codon pieces each continue their own phase.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from gtetools.core.models import Exon, ExonFeature
from gtetools.core.strand import Strand

logger = logging.getLogger(__name__)

CODON_LENGTH = 3


def next_frame(span: int, frame: int) -> int:
    """Get the frame of the feature following one of the given span and frame.

    Args:
        span: Length of the current feature.
        frame: Frame of the current feature.

    Returns:
        Frame of the next feature of the same kind (0, 1 or 2).
    """
    if span >= frame:
        return (frame - span) % CODON_LENGTH
    return CODON_LENGTH - (frame - span) % CODON_LENGTH


def iter_translation_order(exons: Iterable[Exon], strand: Strand) -> Iterator[ExonFeature]:
    """Iterate over exon features in 5' to 3' translation order.

    Forward transcripts are walked as stored. Reverse transcripts are walked
    with both the exon list and each exon's features reversed.

    Args:
        exons: Exons sorted by start.
        strand: Transcript strand; must not be unknown.

    Yields:
        Exon features.
    """
    if strand is Strand.REVERSE:
        for exon in reversed(list(exons)):
            yield from reversed(exon.features)
    else:
        for exon in exons:
            yield from exon.features


def assign_frames(exons: list[Exon], strand: Strand) -> None:
    """Stamp reading frames onto CDS and codon features in place.

    UTR and other features keep ``frame=None``. Transcripts of unknown strand
    are left without frames.

    Args:
        exons: Exons sorted by start, as produced by the inference engine.
        strand: Transcript strand.
    """
    if not strand.is_stranded:
        logger.debug("Skipping frame assignment for transcript of unknown strand")
        return

    frames = {}
    for feature in iter_translation_order(exons, strand):
        if not feature.kind.takes_frame:
            continue
        frame = frames.get(feature.kind, 0)
        feature.frame = frame
        frames[feature.kind] = next_frame(feature.span, frame)
