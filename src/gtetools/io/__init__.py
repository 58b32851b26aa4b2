"""Input/output handlers for refFlat, GTF and GFF3 files."""

from gtetools.io.gff import GffReader, GffType, GffWriter, iter_gff_transcripts, read_gff, write_gff
from gtetools.io.refflat import RefFlatReader, RefFlatRecord, RefFlatWriter, read_refflat, write_refflat

__all__ = [
    "GffReader",
    "GffType",
    "GffWriter",
    "RefFlatReader",
    "RefFlatRecord",
    "RefFlatWriter",
    "iter_gff_transcripts",
    "read_gff",
    "read_refflat",
    "write_gff",
    "write_refflat",
]
