"""Core annotation models and exon feature inference.

Modules:
    strand: Strand values and input resolution
    models: Gene, Transcript, Exon and ExonFeature
    inference: Exon classification and UTR/CDS/codon feature inference
    frames: Reading-frame assignment
    builders: Validating builders for exons, transcripts and genes
"""

from gtetools.core.builders import ExonBuilder, GeneBuilder, TranscriptBuilder
from gtetools.core.frames import assign_frames, next_frame
from gtetools.core.inference import ExonPosition, adjust_coding_coord, classify_exon, infer_exons
from gtetools.core.models import Exon, ExonFeature, FeatureKind, Gene, Transcript
from gtetools.core.strand import Strand, resolve_strand

__all__ = [
    "Exon",
    "ExonBuilder",
    "ExonFeature",
    "ExonPosition",
    "FeatureKind",
    "Gene",
    "GeneBuilder",
    "Strand",
    "Transcript",
    "TranscriptBuilder",
    "adjust_coding_coord",
    "assign_frames",
    "classify_exon",
    "infer_exons",
    "next_frame",
    "resolve_strand",
]
