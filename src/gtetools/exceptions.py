"""Exceptions raised by gtetools.

All exceptions derive from GteError. They are grouped into three families:

- FeatureError: validation failures while building exons, transcripts and
  genes, including every failure of the exon feature inference engine.
- ParseError: malformed records in refFlat, GTF or GFF3 input.
- ConfigurationError: invalid configuration values or files.

Each FeatureError subclass carries a fixed ``description``; the optional
transcript identifier is appended when the error is rendered so that a
skipped record can be traced back to its source.

Example:
    >>> from gtetools.exceptions import CodingTooSmall
    >>> str(CodingTooSmall(transcript_id="tx1"))
    'coding region leaves no room for start codon, transcript ID: tx1'
"""

from __future__ import annotations


class GteError(Exception):
    """Base exception for all gtetools errors."""


class ConfigurationError(GteError):
    """Invalid configuration value or file."""


# =============================================================================
# Feature Errors
# =============================================================================


class FeatureError(GteError):
    """Error raised while constructing annotation features.

    Attributes:
        description: Fixed description of the error kind.
        transcript_id: Identifier of the offending transcript, if known.
    """

    description = "invalid feature"

    def __init__(self, message: str | None = None, transcript_id: str | None = None) -> None:
        super().__init__(message or self.description)
        self.transcript_id = transcript_id

    def with_transcript_id(self, transcript_id: str | None) -> FeatureError:
        """Attach a transcript identifier unless one is already set."""
        if self.transcript_id is None:
            self.transcript_id = transcript_id
        return self

    def __str__(self) -> str:
        message = super().__str__()
        if self.transcript_id:
            return f"{message}, transcript ID: {self.transcript_id}"
        return message


class InvalidInterval(FeatureError):
    description = "interval start coordinate larger than its end coordinate"


class InvalidStrandChar(FeatureError):
    description = "invalid strand character"

    def __init__(self, char: str, transcript_id: str | None = None) -> None:
        super().__init__(f"{self.description}: {char!r}", transcript_id)
        self.char = char


class ConflictingStrand(FeatureError):
    description = "conflicting strand inputs specified"


class UnspecifiedStrand(FeatureError):
    description = "strand not specified"


class InvalidExonInterval(FeatureError):
    description = "exon has larger start than end coordinate"


class InvalidCodingInterval(FeatureError):
    description = "coding region has larger start than end coordinate"


class UnspecifiedExons(FeatureError):
    description = "transcript is defined without exons"


class UnmatchedExons(FeatureError):
    description = (
        "first and/or last exon coordinates do not match transcript start and/or end coordinates"
    )


class CodingTooLarge(FeatureError):
    description = "coding region leaves no room for stop codon in transcript"


class CodingTooSmall(FeatureError):
    description = "coding region leaves no room for start codon"


class CodingNotFullyEnveloped(FeatureError):
    description = "coding region not fully enveloped by exons"


class CodingInIntron(FeatureError):
    description = "coding start and/or end lies in introns"


class TranscriptNotFullyEnveloped(FeatureError):
    description = "transcript not fully enveloped by gene"


class IncompleteCodon(FeatureError):
    """A start or stop codon could not be given all three of its bases."""

    description = "not enough exonic bases to place a complete codon"


class UnclassifiableExon(FeatureError):
    """An exon's position relative to the coding region fits no known case."""

    description = "exon position relative to coding region cannot be classified"

    def __init__(
        self,
        exon: tuple[int, int],
        coding: tuple[int, int],
        transcript_id: str | None = None,
    ) -> None:
        super().__init__(
            f"{self.description}: exon=[{exon[0]},{exon[1]}) cds=[{coding[0]},{coding[1]})",
            transcript_id,
        )
        self.exon = exon
        self.coding = coding


class AmbiguousStopCodon(FeatureError):
    description = "stop-inclusive coding region cannot be trimmed on a transcript of unknown strand"


# =============================================================================
# Parse Errors
# =============================================================================


class ParseError(GteError):
    """Error raised while reading an annotation file.

    Attributes:
        source: Name of the file or stream being read.
        line_number: 1-based line number of the offending record.
        transcript_id: Transcript identifier of the record, if known.
        gene_id: Gene identifier of the record, if known.
    """

    description = "malformed record"

    def __init__(
        self,
        message: str | None = None,
        *,
        source: str = "",
        line_number: int = 0,
        transcript_id: str | None = None,
        gene_id: str | None = None,
    ) -> None:
        super().__init__(message or self.description)
        self.source = source
        self.line_number = line_number
        self.transcript_id = transcript_id
        self.gene_id = gene_id

    def __str__(self) -> str:
        message = super().__str__()
        if self.transcript_id:
            message = f"{message}, transcript ID: {self.transcript_id}"
        elif self.gene_id:
            message = f"{message}, gene ID: {self.gene_id}"
        if self.source and self.line_number:
            return f"{self.source}:{self.line_number}: {message}"
        if self.source:
            return f"{self.source}: {message}"
        return message


class MissingGeneId(ParseError):
    description = "gene identifier not found"


class MissingTranscriptId(ParseError):
    description = "transcript identifier not found"


class MalformedRecord(ParseError):
    description = "record does not have the expected columns"


class ExonCountMismatch(ParseError):
    description = "number of exons and number of exon coordinates are not equal"


class InvalidExonCoord(ParseError):
    description = "exon coordinate is not a non-negative integer"


class DuplicateTranscriptId(ParseError):
    description = "gene has multiple transcripts with the same identifier"


class MissingTranscript(ParseError):
    description = "no 'transcript' feature present"


class MultipleTranscripts(ParseError):
    description = "multiple 'transcript' features present"


class StopCodonInCds(ParseError):
    description = "'stop_codon' feature intersects cds"


class OrphanStart(ParseError):
    description = "start codon exists without stop codon"


class OrphanStop(ParseError):
    description = "stop codon exists without start codon"


class OrphanCodon(ParseError):
    description = "start and stop codon exists without cds"


class OrphanCds(ParseError):
    description = "cds exists without start and/or stop codon"


class UnsupportedGffType(ParseError):
    description = "unsupported gff type"
