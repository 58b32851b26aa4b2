"""GTF/GFF3 file handling.

This module provides a reader that assembles annotated transcripts and genes
from GTF or GFF3 rows, and a writer that emits genes with all of their
inferred sub-exon features.

Features:
    - Parse GTF (``key "value";``) and GFF3 (``key=value;``) attributes
    - Group exon, CDS and codon rows into transcripts
    - Resolve GFF3 ``ID``/``Parent`` hierarchies when identifier
      attributes are absent
    - Skip-and-continue reading with ``strict=False``
    - Write UTR, CDS and codon features with reading frames

Coordinates in files are 1-based, fully closed; in memory they are 0-based,
half-open.

Example:
    >>> from gtetools.io.gff import GffReader, GffType
    >>> with GffReader("annotation.gtf", GffType.GTF) as reader:
    ...     for transcript in reader.iter_transcripts():
    ...         print(transcript.id, transcript.coding_coord(incl_stop=True))
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from enum import Enum
from pathlib import Path
from typing import Any

import attrs

from gtetools.core.builders import GeneBuilder, TranscriptBuilder
from gtetools.core.models import Exon, FeatureKind, Gene, Transcript
from gtetools.core.strand import Strand
from gtetools.exceptions import (
    FeatureError,
    GteError,
    InvalidStrandChar,
    MalformedRecord,
    MissingGeneId,
    MissingTranscript,
    MissingTranscriptId,
    MultipleTranscripts,
    OrphanCds,
    OrphanCodon,
    OrphanStart,
    OrphanStop,
    ParseError,
    StopCodonInCds,
    UnsupportedGffType,
)
from gtetools.io.handles import Source, open_text, update_seq_name

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# GFF column indices
COL_SEQID = 0
COL_SOURCE = 1
COL_TYPE = 2
COL_START = 3
COL_END = 4
COL_SCORE = 5
COL_STRAND = 6
COL_PHASE = 7
COL_ATTRIBUTES = 8

# Feature types
FEATURE_GENE = "gene"
FEATURE_MRNA = "mRNA"
FEATURE_TRANSCRIPT = "transcript"
FEATURE_EXON = "exon"
FEATURE_CDS = "CDS"
FEATURE_START_CODON = "start_codon"
FEATURE_STOP_CODON = "stop_codon"

FEATURE_TYPES_TRANSCRIPT = {FEATURE_TRANSCRIPT, FEATURE_MRNA}
FEATURE_TYPES_KEPT = FEATURE_TYPES_TRANSCRIPT | {
    FEATURE_EXON,
    FEATURE_CDS,
    FEATURE_START_CODON,
    FEATURE_STOP_CODON,
}

ATTR_GENE_ID = "gene_id"
ATTR_TRANSCRIPT_ID = "transcript_id"
ATTR_SOURCE = "source"
ATTR_SCORE = "score"

UNKNOWN = "."


class GffType(Enum):
    """Supported GFF dialects."""

    GTF = "gtf"
    GFF3 = "gff3"

    @classmethod
    def from_path(cls, path: Source) -> GffType:
        """Infer the dialect from a file extension.

        Open handles are resolved through their ``name``.

        Raises:
            UnsupportedGffType: For extensions other than .gtf, .gff, .gff3.
        """
        path = getattr(path, "name", path)
        if not isinstance(path, (str, Path)):
            raise UnsupportedGffType(f"{UnsupportedGffType.description}: cannot infer from {path!r}")
        suffix = Path(path).suffix.lower()
        if suffix == ".gtf":
            return cls.GTF
        if suffix in (".gff", ".gff3"):
            return cls.GFF3
        raise UnsupportedGffType(f"{UnsupportedGffType.description}: {suffix or path!r}", source=str(path))


# Feature names written for each kind, per dialect
FEATURE_NAMES = {
    GffType.GTF: {
        FeatureKind.UTR: "UTR",
        FeatureKind.UTR5: "UTR5",
        FeatureKind.UTR3: "UTR3",
        FeatureKind.CDS: FEATURE_CDS,
        FeatureKind.START_CODON: FEATURE_START_CODON,
        FeatureKind.STOP_CODON: FEATURE_STOP_CODON,
    },
    GffType.GFF3: {
        FeatureKind.UTR: "UTR",
        FeatureKind.UTR5: "five_prime_UTR",
        FeatureKind.UTR3: "three_prime_UTR",
        FeatureKind.CDS: FEATURE_CDS,
        FeatureKind.START_CODON: FEATURE_START_CODON,
        FeatureKind.STOP_CODON: FEATURE_STOP_CODON,
    },
}


# =============================================================================
# Attribute Parsing
# =============================================================================

_GFF3_ESCAPES = [("%", "%25"), (";", "%3B"), ("=", "%3D"), ("&", "%26"), (",", "%2C"), ("\t", "%09")]


def parse_attributes(attr_string: str) -> dict[str, str]:
    """Parse a GFF3 attribute string into a dictionary.

    Args:
        attr_string: Semicolon-separated key=value pairs.

    Returns:
        Dictionary of attribute key-value pairs.
    """
    attributes = {}
    if not attr_string or attr_string == UNKNOWN:
        return attributes

    for item in attr_string.split(";"):
        item = item.strip()
        if not item or "=" not in item:
            continue
        key, value = item.split("=", 1)
        for char, escaped in reversed(_GFF3_ESCAPES):
            value = value.replace(escaped, char)
        attributes[key] = value

    return attributes


def format_attributes(attributes: dict[str, str]) -> str:
    """Format an attribute dictionary as a GFF3 string.

    Args:
        attributes: Dictionary of attributes.

    Returns:
        Semicolon-separated key=value string.
    """
    if not attributes:
        return UNKNOWN

    parts = []
    for key, value in attributes.items():
        value = str(value)
        for char, escaped in _GFF3_ESCAPES:
            value = value.replace(char, escaped)
        parts.append(f"{key}={value}")

    return ";".join(parts)


def parse_gtf_attributes(attr_string: str) -> dict[str, str]:
    """Parse a GTF attribute string into a dictionary.

    Example:
        >>> parse_gtf_attributes('gene_id "g1"; transcript_id "t1";')
        {'gene_id': 'g1', 'transcript_id': 't1'}
    """
    attributes = {}
    if not attr_string or attr_string == UNKNOWN:
        return attributes

    for item in attr_string.split(";"):
        item = item.strip()
        if not item:
            continue
        key, _, value = item.partition(" ")
        attributes[key] = value.strip().strip('"')

    return attributes


def format_gtf_attributes(attributes: dict[str, str]) -> str:
    """Format an attribute dictionary as a GTF string."""
    if not attributes:
        return UNKNOWN
    return " ".join(f'{key} "{value}";' for key, value in attributes.items())


# =============================================================================
# Row Model
# =============================================================================


@attrs.define(slots=True)
class GffRow:
    """A parsed GFF line, in 0-based half-open coordinates."""

    seq_name: str
    source: str
    feature: str
    start: int
    end: int
    score: str
    strand: Strand
    phase: str
    attributes: dict[str, str]
    line_number: int = 0


@attrs.define(slots=True)
class _TranscriptParts:
    """Coordinates collected from the rows of one transcript."""

    gene_id: str
    transcript_id: str
    seq_name: str
    strand: Strand
    line_number: int
    transcript_rows: list[GffRow] = attrs.Factory(list)
    exon_coords: list[tuple[int, int]] = attrs.Factory(list)
    cds_coord: tuple[int, int] | None = None
    codon_5: int | None = None
    codon_3: int | None = None

    def add(self, row: GffRow) -> None:
        feature = row.feature
        if feature in FEATURE_TYPES_TRANSCRIPT:
            self.transcript_rows.append(row)
        elif feature == FEATURE_EXON:
            self.exon_coords.append((row.start, row.end))
        elif feature == FEATURE_CDS:
            if self.cds_coord is None:
                self.cds_coord = (row.start, row.end)
            else:
                self.cds_coord = (min(self.cds_coord[0], row.start), max(self.cds_coord[1], row.end))
        elif self._is_5_prime_codon(feature):
            self.codon_5 = row.start if self.codon_5 is None else min(self.codon_5, row.start)
        elif self._is_3_prime_codon(feature):
            self.codon_3 = row.end if self.codon_3 is None else max(self.codon_3, row.end)

    def _is_5_prime_codon(self, feature: str) -> bool:
        return (self.strand is Strand.FORWARD and feature == FEATURE_START_CODON) or (
            self.strand is Strand.REVERSE and feature == FEATURE_STOP_CODON
        )

    def _is_3_prime_codon(self, feature: str) -> bool:
        return (self.strand is Strand.FORWARD and feature == FEATURE_STOP_CODON) or (
            self.strand is Strand.REVERSE and feature == FEATURE_START_CODON
        )

    def coding_coord(self, loose_codons: bool) -> tuple[int, int] | None:
        """Resolve the stop-inclusive coding region from codon and CDS rows."""
        context = {"transcript_id": self.transcript_id, "line_number": self.line_number}

        if self.codon_5 is None and self.codon_3 is None:
            return None

        if self.codon_5 is not None and self.codon_3 is not None:
            coding = (self.codon_5, self.codon_3)
        elif not loose_codons:
            # The 5' codon is the start codon on the forward strand only
            only_start = (self.codon_5 is None) == (self.strand is Strand.REVERSE)
            raise OrphanStart(**context) if only_start else OrphanStop(**context)
        elif self.cds_coord is None:
            raise OrphanCds(**context)
        else:
            coding = (
                self.codon_5 if self.codon_5 is not None else self.cds_coord[0],
                self.codon_3 if self.codon_3 is not None else self.cds_coord[1],
            )

        if not loose_codons:
            if self.cds_coord is None:
                raise OrphanCodon(**context)
            if self.strand is Strand.FORWARD and coding[1] == self.cds_coord[1]:
                raise StopCodonInCds(**context)
            if self.strand is Strand.REVERSE and coding[0] > self.cds_coord[0]:
                raise StopCodonInCds(**context)

        return coding


# =============================================================================
# GFF Reader
# =============================================================================


class GffReader:
    """Build annotated transcripts and genes from GTF or GFF3 rows.

    Only transcript (or GFF3 mRNA), exon, CDS, start_codon and stop_codon
    rows are used. Rows are grouped into transcripts by gene identifier,
    transcript identifier, sequence name and strand, in order of first
    appearance. The coding region is taken from the codon rows and includes
    the stop codon; UTR and codon features are then inferred from the exons.

    In strict mode any malformed row or transcript raises. Otherwise the
    error is logged, the record is skipped and counted in ``n_skipped``.

    Attributes:
        source: Name of the input, used in error messages.
        gff_type: GFF dialect.
        n_skipped: Number of rows, transcripts or genes skipped so far.

    Example:
        >>> reader = GffReader("annotation.gff3", GffType.GFF3, strict=False)
        >>> genes = list(reader.iter_genes())
        >>> reader.n_skipped
        0
    """

    def __init__(
        self,
        source: Source,
        gff_type: GffType = GffType.GTF,
        gene_id_attr: str = ATTR_GENE_ID,
        transcript_id_attr: str = ATTR_TRANSCRIPT_ID,
        seq_name_prefix: str | None = None,
        seq_name_lstrip: str | None = None,
        loose_codons: bool = False,
        strict: bool = True,
        max_lookback: int | None = None,
    ) -> None:
        """Initialize the reader.

        Args:
            source: Path or open text handle.
            gff_type: GFF dialect.
            gene_id_attr: Attribute holding the gene identifier.
            transcript_id_attr: Attribute holding the transcript identifier.
            seq_name_prefix: Prefix added to every sequence name.
            seq_name_lstrip: Leading string removed from sequence names.
            loose_codons: Fill a missing codon from the CDS bounds and allow
                stop codons inside the CDS.
            strict: Raise on malformed records instead of skipping them.
            max_lookback: Backtracking limit for feature inference.

        Raises:
            FileNotFoundError: If a path is given that does not exist.
        """
        if not isinstance(gff_type, GffType):
            raise UnsupportedGffType(f"{UnsupportedGffType.description}: {gff_type!r}")
        self._handle, self._owns_handle, self.source = open_text(source)
        self.gff_type = gff_type
        self.gene_id_attr = gene_id_attr
        self.transcript_id_attr = transcript_id_attr
        self.seq_name_prefix = seq_name_prefix
        self.seq_name_lstrip = seq_name_lstrip
        self.loose_codons = loose_codons
        self.strict = strict
        self.max_lookback = max_lookback
        self.n_skipped = 0
        self._parts: list[_TranscriptParts] | None = None

    def __enter__(self) -> GffReader:
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
        if self.strict:
            raise error
        self.n_skipped += 1
        logger.warning(f"Skipping record: {error}")

    # -------------------------------------------------------------------------
    # Row parsing
    # -------------------------------------------------------------------------

    def _parse_line(self, line: str, line_number: int) -> GffRow | None:
        """Parse a single GFF line.

        Returns:
            Parsed row, or None for comments and blank lines.

        Raises:
            MalformedRecord: On a wrong column count, bad coordinates or a
                bad strand character.
        """
        line = line.rstrip("\r\n")
        if not line.strip() or line.startswith("#"):
            return None

        parts = line.split("\t")
        if len(parts) != 9:
            raise MalformedRecord(
                f"expected 9 columns, found {len(parts)}", source=self.source, line_number=line_number
            )

        try:
            start = int(parts[COL_START]) - 1
            end = int(parts[COL_END])
            strand = Strand.from_char(parts[COL_STRAND])
        except (ValueError, InvalidStrandChar) as e:
            raise MalformedRecord(str(e), source=self.source, line_number=line_number) from None
        if start < 0 or start >= end:
            raise MalformedRecord(
                f"invalid coordinates {parts[COL_START]}-{parts[COL_END]}",
                source=self.source,
                line_number=line_number,
            )

        if self.gff_type is GffType.GTF:
            attributes = parse_gtf_attributes(parts[COL_ATTRIBUTES])
        else:
            attributes = parse_attributes(parts[COL_ATTRIBUTES])

        return GffRow(
            seq_name=update_seq_name(parts[COL_SEQID], self.seq_name_prefix, self.seq_name_lstrip),
            source=parts[COL_SOURCE],
            feature=parts[COL_TYPE],
            start=start,
            end=end,
            score=parts[COL_SCORE],
            strand=strand,
            phase=parts[COL_PHASE],
            attributes=attributes,
            line_number=line_number,
        )

    def _iter_rows(self) -> Iterator[GffRow]:
        for line_number, line in enumerate(self._handle, 1):
            try:
                row = self._parse_line(line, line_number)
            except ParseError as e:
                self._skip_or_raise(e)
                continue
            if row is not None and row.feature in FEATURE_TYPES_KEPT:
                yield row

    def _resolve_ids(self, row: GffRow, transcript_parents: dict[str, str]) -> tuple[str, str]:
        """Get the (gene_id, transcript_id) of a row.

        GFF3 rows without identifier attributes fall back to the ID/Parent
        hierarchy: transcripts are identified by ID with the gene as Parent,
        other rows by their (first) Parent transcript.
        """
        attributes = row.attributes
        transcript_id = attributes.get(self.transcript_id_attr)
        gene_id = attributes.get(self.gene_id_attr)

        if self.gff_type is GffType.GFF3:
            is_transcript = row.feature in FEATURE_TYPES_TRANSCRIPT
            parent = attributes.get("Parent", "").split(",")[0] or None
            if transcript_id is None:
                transcript_id = attributes.get("ID") if is_transcript else parent
            if gene_id is None and transcript_id is not None:
                gene_id = parent if is_transcript else transcript_parents.get(transcript_id)

        context = {"source": self.source, "line_number": row.line_number}
        if not gene_id:
            raise MissingGeneId(transcript_id=transcript_id, **context)
        if not transcript_id:
            raise MissingTranscriptId(gene_id=gene_id, **context)
        return gene_id, transcript_id

    def _collect_parts(self) -> list[_TranscriptParts]:
        rows = list(self._iter_rows())

        # GFF3 transcript rows map transcript ID -> gene ID for their children
        transcript_parents = {}
        if self.gff_type is GffType.GFF3:
            for row in rows:
                if row.feature in FEATURE_TYPES_TRANSCRIPT and "ID" in row.attributes:
                    parent = row.attributes.get("Parent", "").split(",")[0]
                    if parent:
                        transcript_parents[row.attributes["ID"]] = parent

        groups: dict[tuple[str, str, str, Strand], _TranscriptParts] = {}
        for row in rows:
            try:
                gene_id, transcript_id = self._resolve_ids(row, transcript_parents)
            except ParseError as e:
                self._skip_or_raise(e)
                continue
            key = (gene_id, transcript_id, row.seq_name, row.strand)
            if key not in groups:
                groups[key] = _TranscriptParts(
                    gene_id=gene_id,
                    transcript_id=transcript_id,
                    seq_name=row.seq_name,
                    strand=row.strand,
                    line_number=row.line_number,
                )
            groups[key].add(row)

        logger.debug(f"Collected {len(groups)} transcript(s) from {self.source}")
        return list(groups.values())

    def _ensure_parsed(self) -> list[_TranscriptParts]:
        if self._parts is None:
            self._parts = self._collect_parts()
        return self._parts

    # -------------------------------------------------------------------------
    # Transcript and gene assembly
    # -------------------------------------------------------------------------

    def _build_transcript(self, parts: _TranscriptParts) -> Transcript:
        context = {"transcript_id": parts.transcript_id, "line_number": parts.line_number}
        if not parts.transcript_rows:
            raise MissingTranscript(**context)
        if len(parts.transcript_rows) > 1:
            raise MultipleTranscripts(**context)

        tx_row = parts.transcript_rows[0]
        attributes = {
            key: value
            for key, value in tx_row.attributes.items()
            if key not in (self.gene_id_attr, self.transcript_id_attr, "ID", "Parent")
        }
        attributes[ATTR_SOURCE] = tx_row.source
        if tx_row.score != UNKNOWN:
            attributes[ATTR_SCORE] = tx_row.score

        return TranscriptBuilder(
            parts.seq_name,
            tx_row.start,
            tx_row.end,
            strand=parts.strand,
            transcript_id=parts.transcript_id,
            gene_id=parts.gene_id,
            attributes=attributes,
            exon_coords=parts.exon_coords,
            coding_coord=parts.coding_coord(self.loose_codons),
            coding_incl_stop=True,
            max_lookback=self.max_lookback,
        ).build()

    def iter_transcripts(self) -> Iterator[Transcript]:
        """Iterate over annotated transcripts.

        Yields:
            Transcript objects, in order of first appearance.
        """
        for parts in self._ensure_parsed():
            try:
                yield self._build_transcript(parts)
            except (ParseError, FeatureError) as e:
                self._skip_or_raise(e)

    def iter_genes(self) -> Iterator[Gene]:
        """Iterate over genes.

        Transcripts are grouped by gene identifier, sequence name and strand;
        gene bounds span all of their transcripts.

        Yields:
            Gene objects, in order of first appearance.
        """
        groups: dict[tuple[str, str, Strand], list[Transcript]] = {}
        for transcript in self.iter_transcripts():
            key = (transcript.gene_id, transcript.seq_name, transcript.strand)
            groups.setdefault(key, []).append(transcript)

        for (gene_id, seq_name, strand), transcripts in groups.items():
            try:
                yield GeneBuilder(
                    seq_name,
                    min(tx.start for tx in transcripts),
                    max(tx.end for tx in transcripts),
                    strand=strand,
                    id=gene_id,
                    transcripts={tx.id: tx for tx in transcripts},
                    transcript_coding_incl_stop=True,
                ).build()
            except FeatureError as e:
                self._skip_or_raise(e)


# =============================================================================
# GFF Writer
# =============================================================================


class GffWriter:
    """Write genes with all exon features to GTF or GFF3.

    ``source`` and ``score`` attributes, when present on a gene, transcript
    or exon, fill the source and score columns instead of being written as
    attributes.

    Example:
        >>> with GffWriter("output.gff3", GffType.GFF3) as writer:
        ...     for gene in genes:
        ...         writer.write_gene(gene)
    """

    def __init__(self, target: Source, gff_type: GffType = GffType.GTF, source: str = "gtetools") -> None:
        """Initialize the writer.

        Args:
            target: Output path or open text handle.
            gff_type: GFF dialect.
            source: Default value of the source column.
        """
        if not isinstance(gff_type, GffType):
            raise UnsupportedGffType(f"{UnsupportedGffType.description}: {gff_type!r}")
        self._handle, self._owns_handle, self.target = open_text(target, "w")
        self.gff_type = gff_type
        self.source = source
        self.n_written = 0
        self._header_written = False

    def __enter__(self) -> GffWriter:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Flush the output and close it if the writer opened it."""
        if self._owns_handle and not self._handle.closed:
            self._handle.close()
        elif not self._handle.closed:
            self._handle.flush()

    def write_header(self) -> None:
        """Write the GFF3 version pragma; GTF has no header."""
        if self.gff_type is GffType.GFF3:
            self._handle.write("##gff-version 3\n")
        self._header_written = True

    def _format_line(
        self,
        seq_name: str,
        feature_type: str,
        start: int,
        end: int,
        strand: Strand,
        attributes: dict[str, str],
        source: str,
        score: str = UNKNOWN,
        frame: int | None = None,
    ) -> str:
        """Format one line, converting to 1-based closed coordinates."""
        if self.gff_type is GffType.GTF:
            attr_str = format_gtf_attributes(attributes)
        else:
            attr_str = format_attributes(attributes)
        frame_str = UNKNOWN if frame is None else str(frame)
        return (
            f"{seq_name}\t{source}\t{feature_type}\t{start + 1}\t{end}\t"
            f"{score}\t{strand.char}\t{frame_str}\t{attr_str}\n"
        )

    def _write(self, line: str) -> None:
        self._handle.write(line)
        self.n_written += 1

    @staticmethod
    def _split_columns(attributes: dict[str, str], default_source: str) -> tuple[dict[str, str], str, str]:
        remaining = dict(attributes)
        source = remaining.pop(ATTR_SOURCE, None) or default_source
        score = remaining.pop(ATTR_SCORE, None) or UNKNOWN
        return remaining, source, score

    def write_gene(self, gene: Gene) -> None:
        """Write a gene, its transcripts, exons and exon features.

        Raises:
            MissingGeneId: If the gene has no identifier.
        """
        if not self._header_written:
            self.write_header()
        if not gene.id:
            raise MissingGeneId()

        extra, source, score = self._split_columns(gene.attributes, self.source)
        if self.gff_type is GffType.GTF:
            attributes = {ATTR_GENE_ID: gene.id, **extra}
        else:
            attributes = {"ID": gene.id, **extra}
        self._write(
            self._format_line(
                gene.seq_name, FEATURE_GENE, gene.start, gene.end, gene.strand, attributes, source, score
            )
        )

        for transcript in gene.transcripts.values():
            self.write_transcript(transcript)

    def write_transcript(self, transcript: Transcript) -> None:
        """Write a transcript, its exons and exon features.

        Raises:
            MissingTranscriptId: If the transcript has no identifier.
        """
        if not self._header_written:
            self.write_header()
        if not transcript.id:
            raise MissingTranscriptId(gene_id=transcript.gene_id)

        extra, source, score = self._split_columns(transcript.attributes, self.source)
        if self.gff_type is GffType.GTF:
            feature_type = FEATURE_TRANSCRIPT
            attributes = {ATTR_GENE_ID: transcript.gene_id or "", ATTR_TRANSCRIPT_ID: transcript.id, **extra}
        else:
            feature_type = FEATURE_MRNA if transcript.is_coding else FEATURE_TRANSCRIPT
            attributes = {"ID": transcript.id}
            if transcript.gene_id:
                attributes["Parent"] = transcript.gene_id
            attributes.update(extra)

        self._write(
            self._format_line(
                transcript.seq_name,
                feature_type,
                transcript.start,
                transcript.end,
                transcript.strand,
                attributes,
                source,
                score,
            )
        )

        for index, exon in enumerate(transcript.exons, 1):
            self._write_exon(transcript, exon, index, source)

    def _write_exon(self, transcript: Transcript, exon: Exon, index: int, tx_source: str) -> None:
        extra, source, score = self._split_columns(exon.attributes, tx_source)
        if self.gff_type is GffType.GTF:
            exon_attrs = {ATTR_GENE_ID: transcript.gene_id or "", ATTR_TRANSCRIPT_ID: transcript.id, **extra}
            feature_attrs = exon_attrs
        else:
            exon_attrs = {"ID": exon.id or f"{transcript.id}.exon{index}", "Parent": transcript.id, **extra}
            feature_attrs = {"Parent": transcript.id}

        self._write(
            self._format_line(exon.seq_name, FEATURE_EXON, exon.start, exon.end, exon.strand, exon_attrs, source, score)
        )

        names = FEATURE_NAMES[self.gff_type]
        for feature in exon.features:
            self._write(
                self._format_line(
                    exon.seq_name,
                    names.get(feature.kind, feature.name),
                    feature.start,
                    feature.end,
                    exon.strand,
                    feature_attrs,
                    source,
                    score,
                    frame=feature.frame,
                )
            )

    def write_genes(self, genes: Iterable[Gene]) -> None:
        """Write multiple genes."""
        for gene in genes:
            self.write_gene(gene)


# =============================================================================
# Convenience Functions
# =============================================================================


def read_gff(source: Source, gff_type: GffType | None = None, **kwargs: Any) -> list[Gene]:
    """Read all genes from a GTF or GFF3 file.

    Args:
        source: Path or open text handle.
        gff_type: GFF dialect; inferred from the file extension if None.
        **kwargs: Passed to GffReader.

    Returns:
        List of genes.
    """
    if gff_type is None:
        gff_type = GffType.from_path(source)
    with GffReader(source, gff_type, **kwargs) as reader:
        return list(reader.iter_genes())


def iter_gff_transcripts(source: Source, gff_type: GffType | None = None, **kwargs: Any) -> Iterator[Transcript]:
    """Iterate over transcripts from a GTF or GFF3 file.

    Args:
        source: Path or open text handle.
        gff_type: GFF dialect; inferred from the file extension if None.
        **kwargs: Passed to GffReader.

    Yields:
        Transcript objects.
    """
    if gff_type is None:
        gff_type = GffType.from_path(source)
    with GffReader(source, gff_type, **kwargs) as reader:
        yield from reader.iter_transcripts()


def write_gff(
    genes: Iterable[Gene],
    target: Source,
    gff_type: GffType = GffType.GTF,
    source: str = "gtetools",
) -> int:
    """Write genes to a GTF or GFF3 file.

    Returns:
        Number of lines written.
    """
    with GffWriter(target, gff_type, source=source) as writer:
        writer.write_header()
        writer.write_genes(genes)
        return writer.n_written
