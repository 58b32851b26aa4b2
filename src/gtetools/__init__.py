"""gtetools: Gene annotation toolkit with exon feature inference.

gtetools builds gene, transcript and exon models from raw annotation
coordinates, inferring UTR, CDS, start codon and stop codon features for
every exon, and converts annotations between refFlat, GTF and GFF3.

Example:
    >>> import gtetools
    >>> gtetools.__version__
    '0.1.0'

Modules:
    core: Data models, builders and the exon feature inference engine
    io: Readers and writers for refFlat, GTF and GFF3
    qc: Annotation statistics
    utils: Interval helpers and logging
"""

__version__ = "0.1.0"

from gtetools.core.builders import ExonBuilder, GeneBuilder, TranscriptBuilder
from gtetools.core.models import Exon, ExonFeature, FeatureKind, Gene, Transcript
from gtetools.core.strand import Strand
from gtetools.exceptions import FeatureError, GteError, ParseError
from gtetools.utils.intervals import Interval

__all__ = [
    "__version__",
    "Exon",
    "ExonBuilder",
    "ExonFeature",
    "FeatureError",
    "FeatureKind",
    "Gene",
    "GeneBuilder",
    "GteError",
    "Interval",
    "ParseError",
    "Strand",
    "Transcript",
    "TranscriptBuilder",
]
