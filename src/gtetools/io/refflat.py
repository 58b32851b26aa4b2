"""refFlat file handling.

refFlat is a transcript-oriented, tab-separated format with one transcript
per line, used most prominently by the Picard tools. Its 11 columns are:

    geneName  name  chrom  strand  txStart  txEnd  cdsStart  cdsEnd
    exonCount  exonStarts  exonEnds

All coordinates are 0-based, half-open. The coding region includes the stop
codon; a record with ``cdsStart == cdsEnd`` is non-coding.

Example:
    >>> from gtetools.io.refflat import RefFlatReader
    >>> with RefFlatReader("annotation.refFlat") as reader:
    ...     for gene in reader.iter_genes():
    ...         print(gene.id, gene.n_transcripts)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Any

import attrs

from gtetools.core.builders import GeneBuilder, TranscriptBuilder
from gtetools.core.models import Gene, Transcript
from gtetools.exceptions import (
    DuplicateTranscriptId,
    ExonCountMismatch,
    FeatureError,
    GteError,
    InvalidExonCoord,
    MalformedRecord,
    MissingGeneId,
    MissingTranscriptId,
    ParseError,
)
from gtetools.io.handles import Source, open_text, update_seq_name

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

N_COLUMNS = 11

COL_GENE_ID = 0
COL_TRANSCRIPT_ID = 1
COL_SEQ_NAME = 2
COL_STRAND = 3
COL_TX_START = 4
COL_TX_END = 5
COL_CDS_START = 6
COL_CDS_END = 7
COL_EXON_COUNT = 8
COL_EXON_STARTS = 9
COL_EXON_ENDS = 10


def _parse_coords(raw: str, transcript_id: str) -> list[int]:
    coords = []
    for item in raw.strip(",").split(","):
        try:
            value = int(item)
        except ValueError:
            raise InvalidExonCoord(
                f"{InvalidExonCoord.description}: {item!r}", transcript_id=transcript_id
            ) from None
        if value < 0:
            raise InvalidExonCoord(f"{InvalidExonCoord.description}: {item!r}", transcript_id=transcript_id)
        coords.append(value)
    return coords


def _format_coords(coords: Iterable[int]) -> str:
    return "".join(f"{coord}," for coord in coords)


# =============================================================================
# Data Model
# =============================================================================


@attrs.define(slots=True)
class RefFlatRecord:
    """A single refFlat row with parsed exon coordinates.

    Attributes:
        gene_id: Gene identifier (column 1).
        transcript_id: Transcript identifier (column 2).
        seq_name: Sequence name.
        strand: Strand character.
        transcript_start: Transcript start.
        transcript_end: Transcript end.
        coding_start: Coding region start, stop codon included on the
            reverse strand.
        coding_end: Coding region end, stop codon included on the forward
            strand.
        exon_starts: Exon start coordinates.
        exon_ends: Exon end coordinates.
    """

    gene_id: str
    transcript_id: str
    seq_name: str
    strand: str
    transcript_start: int
    transcript_end: int
    coding_start: int
    coding_end: int
    exon_starts: list[int] = attrs.Factory(list)
    exon_ends: list[int] = attrs.Factory(list)

    @property
    def n_exons(self) -> int:
        """Number of exons."""
        return len(self.exon_starts)

    @property
    def is_coding(self) -> bool:
        return self.coding_start != self.coding_end

    @classmethod
    def from_row(cls, fields: list[str]) -> RefFlatRecord:
        """Create a record from the columns of a refFlat line.

        Args:
            fields: The 11 tab-separated column values.

        Returns:
            The parsed record.

        Raises:
            MalformedRecord: On a wrong column count or a non-integer scalar.
            InvalidExonCoord: On a malformed exon coordinate.
            ExonCountMismatch: If the exon count and coordinate lists disagree.
        """
        if len(fields) != N_COLUMNS:
            raise MalformedRecord(f"expected {N_COLUMNS} columns, found {len(fields)}")

        transcript_id = fields[COL_TRANSCRIPT_ID]
        try:
            tx_start, tx_end, cds_start, cds_end, n_exons = (
                int(fields[col])
                for col in (COL_TX_START, COL_TX_END, COL_CDS_START, COL_CDS_END, COL_EXON_COUNT)
            )
        except ValueError as e:
            raise MalformedRecord(f"invalid integer column: {e}", transcript_id=transcript_id) from None

        exon_starts = _parse_coords(fields[COL_EXON_STARTS], transcript_id)
        exon_ends = _parse_coords(fields[COL_EXON_ENDS], transcript_id)
        if len(exon_starts) != n_exons or len(exon_ends) != n_exons:
            raise ExonCountMismatch(transcript_id=transcript_id)

        return cls(
            gene_id=fields[COL_GENE_ID],
            transcript_id=transcript_id,
            seq_name=fields[COL_SEQ_NAME],
            strand=fields[COL_STRAND],
            transcript_start=tx_start,
            transcript_end=tx_end,
            coding_start=cds_start,
            coding_end=cds_end,
            exon_starts=exon_starts,
            exon_ends=exon_ends,
        )

    @classmethod
    def from_transcript(cls, transcript: Transcript) -> RefFlatRecord:
        """Create a record from an annotated transcript.

        Raises:
            MissingTranscriptId: If the transcript has no identifier.
        """
        if not transcript.id:
            raise MissingTranscriptId()
        coding = transcript.coding_coord(incl_stop=True)
        if coding is None:
            coding = (transcript.end, transcript.end)
        return cls(
            gene_id=transcript.gene_id or "",
            transcript_id=transcript.id,
            seq_name=transcript.seq_name,
            strand=transcript.strand.char,
            transcript_start=transcript.start,
            transcript_end=transcript.end,
            coding_start=coding[0],
            coding_end=coding[1],
            exon_starts=[exon.start for exon in transcript.exons],
            exon_ends=[exon.end for exon in transcript.exons],
        )

    def to_transcript(self, max_lookback: int | None = None) -> Transcript:
        """Build an annotated transcript from the record.

        Raises:
            MissingTranscriptId: If the transcript identifier is empty.
            MissingGeneId: If the gene identifier is empty.
            FeatureError: If the coordinates are inconsistent.
        """
        if not self.transcript_id:
            raise MissingTranscriptId(gene_id=self.gene_id or None)
        if not self.gene_id:
            raise MissingGeneId(transcript_id=self.transcript_id)

        return TranscriptBuilder(
            self.seq_name,
            self.transcript_start,
            self.transcript_end,
            strand_char=self.strand,
            transcript_id=self.transcript_id,
            gene_id=self.gene_id,
            exon_coords=list(zip(self.exon_starts, self.exon_ends)),
            coding_coord=(self.coding_start, self.coding_end) if self.is_coding else None,
            coding_incl_stop=True,
            max_lookback=max_lookback,
        ).build()

    def to_row(self) -> list[str]:
        """Format the record as refFlat column values."""
        return [
            self.gene_id,
            self.transcript_id,
            self.seq_name,
            self.strand,
            str(self.transcript_start),
            str(self.transcript_end),
            str(self.coding_start),
            str(self.coding_end),
            str(self.n_exons),
            _format_coords(self.exon_starts),
            _format_coords(self.exon_ends),
        ]


# =============================================================================
# Reader
# =============================================================================


class RefFlatReader:
    """Streaming refFlat reader.

    In strict mode any malformed record raises. Otherwise the error is
    logged, the record is skipped and counted in ``n_skipped``.

    Attributes:
        source: Name of the input, used in error messages.
        n_skipped: Number of records or genes skipped so far.
    """

    def __init__(
        self,
        source: Source,
        seq_name_prefix: str | None = None,
        seq_name_lstrip: str | None = None,
        strict: bool = True,
        max_lookback: int | None = None,
    ) -> None:
        """Initialize the reader.

        Args:
            source: Path or open text handle.
            seq_name_prefix: Prefix added to every sequence name.
            seq_name_lstrip: Leading string removed from sequence names.
            strict: Raise on malformed records instead of skipping them.
            max_lookback: Backtracking limit for feature inference.

        Raises:
            FileNotFoundError: If a path is given that does not exist.
        """
        self._handle, self._owns_handle, self.source = open_text(source)
        self.seq_name_prefix = seq_name_prefix
        self.seq_name_lstrip = seq_name_lstrip
        self.strict = strict
        self.max_lookback = max_lookback
        self.n_skipped = 0
        self._line_number = 0

    def __enter__(self) -> RefFlatReader:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the input if the reader opened it."""
        if self._owns_handle and not self._handle.closed:
            self._handle.close()

    def _skip_or_raise(self, error: GteError) -> None:
        if isinstance(error, ParseError) and not error.source:
            error.source = self.source
            error.line_number = error.line_number or self._line_number
        if self.strict:
            raise error
        self.n_skipped += 1
        logger.warning(f"Skipping record: {error}")

    def _iter_lines(self) -> Iterator[tuple[int, list[str]]]:
        for line_number, line in enumerate(self._handle, 1):
            line = line.rstrip("\r\n")
            if not line.strip() or line.startswith("#"):
                continue
            yield line_number, line.split("\t")

    def iter_records(self) -> Iterator[RefFlatRecord]:
        """Iterate over parsed records.

        Yields:
            RefFlatRecord objects with updated sequence names.
        """
        for line_number, fields in self._iter_lines():
            self._line_number = line_number
            try:
                record = RefFlatRecord.from_row(fields)
            except ParseError as e:
                self._skip_or_raise(e)
                continue
            record.seq_name = update_seq_name(record.seq_name, self.seq_name_prefix, self.seq_name_lstrip)
            yield record

    def iter_transcripts(self) -> Iterator[Transcript]:
        """Iterate over annotated transcripts, one per record."""
        for record in self.iter_records():
            try:
                yield record.to_transcript(self.max_lookback)
            except (ParseError, FeatureError) as e:
                self._skip_or_raise(e)

    def iter_genes(self) -> Iterator[Gene]:
        """Iterate over genes built from consecutive records.

        Consecutive records sharing gene identifier, sequence name and strand
        form one gene. Gene bounds span all of its transcripts.

        Raises:
            DuplicateTranscriptId: If a gene holds a transcript identifier
                twice (strict mode).
        """
        group_key: tuple[str, str, str] | None = None
        group: list[RefFlatRecord] = []

        for record in self.iter_records():
            key = (record.gene_id, record.seq_name, record.strand)
            if key != group_key and group:
                gene = self._build_gene(group)
                if gene is not None:
                    yield gene
                group = []
            group_key = key
            group.append(record)

        if group:
            gene = self._build_gene(group)
            if gene is not None:
                yield gene

    def _build_gene(self, records: list[RefFlatRecord]) -> Gene | None:
        first = records[0]
        transcripts: dict[str, Transcript] = {}

        for record in records:
            try:
                transcript = record.to_transcript(self.max_lookback)
            except (ParseError, FeatureError) as e:
                self._skip_or_raise(e)
                continue
            if transcript.id in transcripts:
                self._skip_or_raise(DuplicateTranscriptId(gene_id=first.gene_id))
                return None
            transcripts[transcript.id] = transcript

        if not transcripts:
            return None

        try:
            return GeneBuilder(
                first.seq_name,
                min(tx.start for tx in transcripts.values()),
                max(tx.end for tx in transcripts.values()),
                strand_char=first.strand,
                id=first.gene_id,
                transcripts=transcripts,
                transcript_coding_incl_stop=True,
            ).build()
        except FeatureError as e:
            self._skip_or_raise(e)
            return None


# =============================================================================
# Writer
# =============================================================================


class RefFlatWriter:
    """refFlat writer.

    Example:
        >>> with RefFlatWriter("output.refFlat") as writer:
        ...     for gene in genes:
        ...         writer.write_gene(gene)
    """

    def __init__(self, target: Source) -> None:
        self._handle, self._owns_handle, self.target = open_text(target, "w")
        self.n_written = 0

    def __enter__(self) -> RefFlatWriter:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Flush the output and close it if the writer opened it."""
        if self._owns_handle and not self._handle.closed:
            self._handle.close()
        elif not self._handle.closed:
            self._handle.flush()

    def write_record(self, record: RefFlatRecord) -> None:
        """Write one record as a line."""
        self._handle.write("\t".join(record.to_row()) + "\n")
        self.n_written += 1

    def write_transcript(self, transcript: Transcript) -> None:
        """Write one transcript as a line."""
        self.write_record(RefFlatRecord.from_transcript(transcript))

    def write_gene(self, gene: Gene) -> None:
        """Write every transcript of a gene, one line each."""
        for transcript in gene.transcripts.values():
            self.write_transcript(transcript)


# =============================================================================
# Convenience Functions
# =============================================================================


def read_refflat(source: Source, **kwargs: Any) -> list[Gene]:
    """Read all genes from a refFlat file.

    Args:
        source: Path or open text handle.
        **kwargs: Passed to RefFlatReader.

    Returns:
        List of genes, in file order.
    """
    with RefFlatReader(source, **kwargs) as reader:
        return list(reader.iter_genes())


def write_refflat(genes: Iterable[Gene], target: Source) -> int:
    """Write genes to a refFlat file.

    Returns:
        Number of lines written.
    """
    with RefFlatWriter(target) as writer:
        for gene in genes:
            writer.write_gene(gene)
        return writer.n_written
