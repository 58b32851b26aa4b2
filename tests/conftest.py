"""Pytest configuration and shared fixtures for gtetools tests.

This module contains fixtures that are shared across multiple test modules.
Fixtures are organized by category:

- Coordinate fixtures: Exon layouts used by the inference tests
- Annotation text fixtures: refFlat, GTF and GFF3 records
- File fixtures: The same records written to temporary files
"""

from pathlib import Path

import pytest

# =============================================================================
# Coordinate Fixtures
# =============================================================================


@pytest.fixture
def three_exons() -> list[tuple[int, int]]:
    """Three exons of a transcript spanning [100, 1000)."""
    return [(100, 300), (400, 500), (700, 1000)]


# =============================================================================
# Annotation Text Fixtures
# =============================================================================

# Two genes on two sequences:
# - g1 (+): tx1 coding [200, 710) plus stop codon [710, 713); tx3 non-coding
# - g2 (-): tx2 coding [200, 800) plus stop codon [197, 200)
REFFLAT_TEXT = (
    "g1\ttx1\tchr1\t+\t100\t1000\t200\t713\t3\t100,400,700,\t300,500,1000,\n"
    "g1\ttx3\tchr1\t+\t100\t1000\t1000\t1000\t2\t100,700,\t300,1000,\n"
    "g2\ttx2\tchr2\t-\t100\t1000\t197\t800\t2\t100,700,\t300,1000,\n"
)


def _gtf_line(seq: str, feature: str, start: int, end: int, strand: str, frame: str, gid: str, tid: str) -> str:
    return f'{seq}\ttest\t{feature}\t{start}\t{end}\t.\t{strand}\t{frame}\tgene_id "{gid}"; transcript_id "{tid}";\n'


GTF_TEXT = "".join(
    [
        "#!genome-build test\n",
        _gtf_line("chr1", "transcript", 101, 1000, "+", ".", "g1", "tx1"),
        _gtf_line("chr1", "exon", 101, 300, "+", ".", "g1", "tx1"),
        _gtf_line("chr1", "exon", 401, 500, "+", ".", "g1", "tx1"),
        _gtf_line("chr1", "exon", 701, 1000, "+", ".", "g1", "tx1"),
        _gtf_line("chr1", "CDS", 201, 300, "+", "0", "g1", "tx1"),
        _gtf_line("chr1", "CDS", 401, 500, "+", "2", "g1", "tx1"),
        _gtf_line("chr1", "CDS", 701, 710, "+", "1", "g1", "tx1"),
        _gtf_line("chr1", "start_codon", 201, 203, "+", "0", "g1", "tx1"),
        _gtf_line("chr1", "stop_codon", 711, 713, "+", "0", "g1", "tx1"),
        _gtf_line("chr1", "transcript", 101, 1000, "+", ".", "g1", "tx3"),
        _gtf_line("chr1", "exon", 101, 300, "+", ".", "g1", "tx3"),
        _gtf_line("chr1", "exon", 701, 1000, "+", ".", "g1", "tx3"),
        _gtf_line("chr2", "transcript", 101, 1000, "-", ".", "g2", "tx2"),
        _gtf_line("chr2", "exon", 101, 300, "-", ".", "g2", "tx2"),
        _gtf_line("chr2", "exon", 701, 1000, "-", ".", "g2", "tx2"),
        _gtf_line("chr2", "CDS", 201, 300, "-", "2", "g2", "tx2"),
        _gtf_line("chr2", "CDS", 701, 800, "-", "0", "g2", "tx2"),
        _gtf_line("chr2", "start_codon", 798, 800, "-", "0", "g2", "tx2"),
        _gtf_line("chr2", "stop_codon", 198, 200, "-", "0", "g2", "tx2"),
    ]
)

GFF3_TEXT = "\n".join(
    [
        "##gff-version 3",
        "chr1\ttest\tgene\t101\t1000\t.\t+\t.\tID=g1",
        "chr1\ttest\tmRNA\t101\t1000\t.\t+\t.\tID=tx1;Parent=g1",
        "chr1\ttest\texon\t101\t300\t.\t+\t.\tID=tx1.exon1;Parent=tx1",
        "chr1\ttest\texon\t401\t500\t.\t+\t.\tID=tx1.exon2;Parent=tx1",
        "chr1\ttest\texon\t701\t1000\t.\t+\t.\tID=tx1.exon3;Parent=tx1",
        "chr1\ttest\tCDS\t201\t300\t.\t+\t0\tID=cds1;Parent=tx1",
        "chr1\ttest\tCDS\t401\t500\t.\t+\t2\tID=cds1;Parent=tx1",
        "chr1\ttest\tCDS\t701\t710\t.\t+\t1\tID=cds1;Parent=tx1",
        "chr1\ttest\tstart_codon\t201\t203\t.\t+\t0\tParent=tx1",
        "chr1\ttest\tstop_codon\t711\t713\t.\t+\t0\tParent=tx1",
        "",
    ]
)


@pytest.fixture
def refflat_text() -> str:
    """refFlat records of two genes with three transcripts."""
    return REFFLAT_TEXT


@pytest.fixture
def gtf_text() -> str:
    """GTF rows describing the same transcripts as ``refflat_text``."""
    return GTF_TEXT


@pytest.fixture
def gff3_text() -> str:
    """GFF3 rows for tx1, using an ID/Parent hierarchy."""
    return GFF3_TEXT


# =============================================================================
# File Fixtures
# =============================================================================


@pytest.fixture
def refflat_file(tmp_path: Path, refflat_text: str) -> Path:
    """Write the refFlat records to a temporary file."""
    path = tmp_path / "annotation.refFlat"
    path.write_text(refflat_text)
    return path


@pytest.fixture
def gtf_file(tmp_path: Path, gtf_text: str) -> Path:
    """Write the GTF rows to a temporary file."""
    path = tmp_path / "annotation.gtf"
    path.write_text(gtf_text)
    return path


@pytest.fixture
def gff3_file(tmp_path: Path, gff3_text: str) -> Path:
    """Write the GFF3 rows to a temporary file."""
    path = tmp_path / "annotation.gff3"
    path.write_text(gff3_text)
    return path
