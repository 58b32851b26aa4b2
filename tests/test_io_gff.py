"""Unit tests for gtetools.io.gff module.

Tests cover:
- GTF and GFF3 attribute parsing and formatting
- GffType inference from file names
- GffReader assembly of transcripts and genes (1-based GFF to 0-based internal)
- Codon and CDS consistency checks, strict and loose
- GffWriter output of inferred exon features
- Conversion round trips between refFlat, GTF and GFF3
"""

import io
from pathlib import Path

import pytest

from gtetools.core.strand import Strand
from gtetools.exceptions import (
    MalformedRecord,
    MissingGeneId,
    MissingTranscript,
    MultipleTranscripts,
    OrphanCds,
    OrphanCodon,
    OrphanStart,
    OrphanStop,
    StopCodonInCds,
    UnsupportedGffType,
)
from gtetools.io.gff import (
    GffReader,
    GffType,
    GffWriter,
    format_attributes,
    format_gtf_attributes,
    iter_gff_transcripts,
    parse_attributes,
    parse_gtf_attributes,
    read_gff,
    write_gff,
)
from gtetools.io.refflat import RefFlatWriter, read_refflat

IDS = 'gene_id "g1"; transcript_id "tx1";'


def gtf_line(feature: str, start: int, end: int, strand: str = "+", attrs: str = IDS, score: str = ".") -> str:
    return f"chr1\ttest\t{feature}\t{start}\t{end}\t{score}\t{strand}\t.\t{attrs}\n"


def single_exon_gtf(*codon_rows: str, cds: tuple[int, int] | None = (201, 700), strand: str = "+") -> str:
    """GTF text of a one-exon transcript with the given codon rows."""
    rows = [gtf_line("transcript", 101, 1000, strand), gtf_line("exon", 101, 1000, strand)]
    if cds is not None:
        rows.append(gtf_line("CDS", cds[0], cds[1], strand))
    rows.extend(codon_rows)
    return "".join(rows)


def read_transcripts(text: str, gff_type: GffType = GffType.GTF, **kwargs) -> list:
    with GffReader(io.StringIO(text), gff_type, **kwargs) as reader:
        return list(reader.iter_transcripts())


def to_refflat(transcripts) -> str:
    output = io.StringIO()
    with RefFlatWriter(output) as writer:
        for transcript in transcripts:
            writer.write_transcript(transcript)
    return output.getvalue()


# =============================================================================
# Utility Function Tests
# =============================================================================


class TestParseAttributes:
    """Tests for GFF3 attribute parsing."""

    def test_simple_attributes(self) -> None:
        attrs = parse_attributes("ID=gene1;Name=TestGene")

        assert attrs == {"ID": "gene1", "Name": "TestGene"}

    def test_url_encoded_attributes(self) -> None:
        """Test parsing URL-encoded attributes."""
        attrs = parse_attributes("ID=gene1;Note=A%3Bgene%3Dx")

        assert attrs["Note"] == "A;gene=x"

    def test_empty_string(self) -> None:
        assert parse_attributes("") == {}
        assert parse_attributes(".") == {}

    def test_format_round_trip(self) -> None:
        """Test that reserved characters are escaped and restored."""
        attrs = {"ID": "tx1", "Note": "a;b=c,d%"}

        formatted = format_attributes(attrs)

        assert formatted == "ID=tx1;Note=a%3Bb%3Dc%2Cd%25"
        assert parse_attributes(formatted) == attrs

    def test_format_empty(self) -> None:
        assert format_attributes({}) == "."


class TestParseGtfAttributes:
    """Tests for GTF attribute parsing."""

    def test_simple_attributes(self) -> None:
        attrs = parse_gtf_attributes('gene_id "g1"; transcript_id "t1"; note "two words";')

        assert attrs == {"gene_id": "g1", "transcript_id": "t1", "note": "two words"}

    def test_format(self) -> None:
        assert format_gtf_attributes({"gene_id": "g1", "transcript_id": "t1"}) == 'gene_id "g1"; transcript_id "t1";'


class TestGffType:
    """Tests for GFF dialect inference."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("genes.gtf", GffType.GTF),
            ("genes.GTF", GffType.GTF),
            ("genes.gff", GffType.GFF3),
            ("genes.gff3", GffType.GFF3),
        ],
    )
    def test_from_path(self, name: str, expected: GffType) -> None:
        assert GffType.from_path(name) is expected

    def test_from_handle(self, gtf_file: Path) -> None:
        """Test inference through the name of an open handle."""
        with open(gtf_file) as handle:
            assert GffType.from_path(handle) is GffType.GTF

    def test_unsupported(self) -> None:
        with pytest.raises(UnsupportedGffType):
            GffType.from_path("genes.bed")

    def test_nameless_handle(self) -> None:
        with pytest.raises(UnsupportedGffType):
            GffType.from_path(io.StringIO(""))


# =============================================================================
# Reader Tests
# =============================================================================


class TestGffReader:
    """Tests for GffReader."""

    def test_gtf_transcripts(self, gtf_file: Path) -> None:
        """Test assembling transcripts from GTF rows."""
        with GffReader(gtf_file, GffType.GTF) as reader:
            transcripts = list(reader.iter_transcripts())

        assert [tx.id for tx in transcripts] == ["tx1", "tx3", "tx2"]
        tx1, tx3, tx2 = transcripts
        assert tx1.gene_id == "g1"
        assert tx1.exon_coords == [(100, 300), (400, 500), (700, 1000)]
        assert tx1.coding_coord() == (200, 710)
        assert tx1.coding_coord(incl_stop=True) == (200, 713)
        assert tx1.attributes == {"source": "test"}
        assert not tx3.is_coding
        assert tx2.strand is Strand.REVERSE
        assert tx2.coding_coord(incl_stop=True) == (197, 800)

    def test_gtf_genes(self, gtf_file: Path) -> None:
        """Test grouping transcripts into genes."""
        genes = read_gff(gtf_file)

        assert [gene.id for gene in genes] == ["g1", "g2"]
        assert list(genes[0].transcripts) == ["tx1", "tx3"]
        assert (genes[1].seq_name, genes[1].start, genes[1].end) == ("chr2", 100, 1000)

    def test_gtf_to_refflat(self, gtf_file: Path, refflat_text: str) -> None:
        """Test that GTF rows convert to the equivalent refFlat records."""
        assert to_refflat(iter_gff_transcripts(gtf_file)) == refflat_text

    def test_gff3_hierarchy(self, gff3_file: Path) -> None:
        """Test identifiers resolved from GFF3 ID and Parent attributes."""
        genes = read_gff(gff3_file)

        assert len(genes) == 1
        tx = genes[0].transcripts["tx1"]
        assert tx.gene_id == "g1"
        assert tx.n_exons == 3
        assert tx.coding_coord(incl_stop=True) == (200, 713)

    def test_custom_id_attributes(self) -> None:
        """Test reading identifiers from other attribute names."""
        attrs = 'gene_name "G1"; tid "T1";'
        text = gtf_line("transcript", 101, 1000, attrs=attrs) + gtf_line("exon", 101, 1000, attrs=attrs)

        transcripts = read_transcripts(text, gene_id_attr="gene_name", transcript_id_attr="tid")

        assert (transcripts[0].gene_id, transcripts[0].id) == ("G1", "T1")

    def test_score_kept(self) -> None:
        """Test that a transcript score is kept as an attribute."""
        text = gtf_line("transcript", 101, 1000, score="0.9") + gtf_line("exon", 101, 1000)

        assert read_transcripts(text)[0].attributes == {"source": "test", "score": "0.9"}

    def test_seq_name_update(self, gtf_file: Path) -> None:
        genes = read_gff(gtf_file, seq_name_lstrip="chr", seq_name_prefix="Chr")

        assert [gene.seq_name for gene in genes] == ["Chr1", "Chr2"]

    def test_missing_transcript(self) -> None:
        with pytest.raises(MissingTranscript):
            read_transcripts(gtf_line("exon", 101, 1000))

    def test_multiple_transcripts(self) -> None:
        text = gtf_line("transcript", 101, 1000) + single_exon_gtf(cds=None)

        with pytest.raises(MultipleTranscripts):
            read_transcripts(text)

    def test_missing_gene_id(self) -> None:
        """Test that rows without a gene identifier are rejected."""
        with pytest.raises(MissingGeneId) as excinfo:
            read_transcripts(gtf_line("exon", 101, 1000, attrs='transcript_id "tx1";'))

        assert excinfo.value.line_number == 1

    def test_wrong_column_count(self) -> None:
        with pytest.raises(MalformedRecord):
            read_transcripts("chr1\ttest\texon\t101\t1000\t.\t+\t.\n")

    def test_invalid_strand(self) -> None:
        with pytest.raises(MalformedRecord):
            read_transcripts(gtf_line("exon", 101, 1000, strand="x"))

    def test_invalid_coordinates(self) -> None:
        with pytest.raises(MalformedRecord):
            read_transcripts(gtf_line("exon", 0, 1000))

    def test_skip_and_continue(self, gtf_text: str) -> None:
        """Test that malformed rows and transcripts are skipped in non-strict mode."""
        bad = "chr1\tbroken\n" + gtf_line("exon", 101, 1000, attrs='gene_id "g9"; transcript_id "tx9";')
        reader = GffReader(io.StringIO(bad + gtf_text), GffType.GTF, strict=False)

        transcripts = list(reader.iter_transcripts())

        assert [tx.id for tx in transcripts] == ["tx1", "tx3", "tx2"]
        assert reader.n_skipped == 2


class TestCodonChecks:
    """Tests for codon and CDS consistency."""

    def test_complete(self) -> None:
        """Test a transcript with both codons outside the CDS."""
        text = single_exon_gtf(gtf_line("start_codon", 201, 203), gtf_line("stop_codon", 701, 703))

        assert read_transcripts(text)[0].coding_coord() == (200, 700)

    def test_orphan_start(self) -> None:
        with pytest.raises(OrphanStart):
            read_transcripts(single_exon_gtf(gtf_line("start_codon", 201, 203)))

    def test_orphan_stop(self) -> None:
        with pytest.raises(OrphanStop):
            read_transcripts(single_exon_gtf(gtf_line("stop_codon", 701, 703)))

    def test_orphan_start_reverse(self) -> None:
        """Test that the missing codon is named correctly on the reverse strand."""
        text = single_exon_gtf(gtf_line("start_codon", 698, 700, "-"), cds=(201, 700), strand="-")

        with pytest.raises(OrphanStart):
            read_transcripts(text)

    def test_orphan_stop_reverse(self) -> None:
        text = single_exon_gtf(gtf_line("stop_codon", 198, 200, "-"), cds=(201, 700), strand="-")

        with pytest.raises(OrphanStop):
            read_transcripts(text)

    def test_orphan_codon(self) -> None:
        """Test that codons require CDS rows."""
        text = single_exon_gtf(gtf_line("start_codon", 201, 203), gtf_line("stop_codon", 701, 703), cds=None)

        with pytest.raises(OrphanCodon):
            read_transcripts(text)

    def test_stop_codon_in_cds(self) -> None:
        """Test that a CDS containing the stop codon is rejected."""
        text = single_exon_gtf(
            gtf_line("start_codon", 201, 203), gtf_line("stop_codon", 701, 703), cds=(201, 703)
        )

        with pytest.raises(StopCodonInCds):
            read_transcripts(text)

    def test_loose_stop_codon_in_cds(self) -> None:
        """Test that loose mode accepts a CDS containing the stop codon."""
        text = single_exon_gtf(
            gtf_line("start_codon", 201, 203), gtf_line("stop_codon", 701, 703), cds=(201, 703)
        )

        tx = read_transcripts(text, loose_codons=True)[0]

        assert tx.coding_coord(incl_stop=True) == (200, 703)

    def test_loose_single_codon(self) -> None:
        """Test that loose mode takes the missing codon bound from the CDS."""
        text = single_exon_gtf(gtf_line("start_codon", 201, 203), cds=(201, 703))

        tx = read_transcripts(text, loose_codons=True)[0]

        assert tx.coding_coord() == (200, 700)

    def test_loose_single_codon_without_cds(self) -> None:
        text = single_exon_gtf(gtf_line("start_codon", 201, 203), cds=None)

        with pytest.raises(OrphanCds):
            read_transcripts(text, loose_codons=True)


# =============================================================================
# Writer Tests
# =============================================================================


class TestGffWriter:
    """Tests for GffWriter."""

    def test_gtf_features(self, refflat_file: Path) -> None:
        """Test that inferred features are written with 1-based coordinates and frames."""
        output = io.StringIO()
        write_gff(read_refflat(refflat_file), output)
        lines = output.getvalue().splitlines()
        ids = 'gene_id "g1"; transcript_id "tx1";'

        assert lines[0] == 'chr1\tgtetools\tgene\t101\t1000\t.\t+\t.\tgene_id "g1";'
        assert lines[1] == f"chr1\tgtetools\ttranscript\t101\t1000\t.\t+\t.\t{ids}"
        assert lines[2:7] == [
            f"chr1\tgtetools\texon\t101\t300\t.\t+\t.\t{ids}",
            f"chr1\tgtetools\tUTR5\t101\t200\t.\t+\t.\t{ids}",
            f"chr1\tgtetools\tstart_codon\t201\t203\t.\t+\t0\t{ids}",
            f"chr1\tgtetools\tCDS\t201\t300\t.\t+\t0\t{ids}",
            f"chr1\tgtetools\texon\t401\t500\t.\t+\t.\t{ids}",
        ]
        assert f"chr1\tgtetools\tCDS\t701\t710\t.\t+\t1\t{ids}" in lines
        assert f"chr1\tgtetools\tstop_codon\t711\t713\t.\t+\t0\t{ids}" in lines
        assert f"chr1\tgtetools\tUTR3\t711\t1000\t.\t+\t.\t{ids}" in lines

    def test_gtf_reverse_frames(self, refflat_file: Path) -> None:
        """Test reverse strand CDS frames in the output."""
        output = io.StringIO()
        write_gff(read_refflat(refflat_file), output)
        ids = 'gene_id "g2"; transcript_id "tx2";'

        assert f"chr2\tgtetools\tCDS\t201\t300\t.\t-\t2\t{ids}" in output.getvalue()
        assert f"chr2\tgtetools\tstop_codon\t198\t200\t.\t-\t0\t{ids}" in output.getvalue()

    def test_gff3_output(self, refflat_file: Path) -> None:
        """Test GFF3 header, hierarchy attributes and feature names."""
        output = io.StringIO()
        write_gff(read_refflat(refflat_file), output, GffType.GFF3)
        lines = output.getvalue().splitlines()

        assert lines[0] == "##gff-version 3"
        assert lines[1] == "chr1\tgtetools\tgene\t101\t1000\t.\t+\t.\tID=g1"
        assert lines[2] == "chr1\tgtetools\tmRNA\t101\t1000\t.\t+\t.\tID=tx1;Parent=g1"
        assert lines[3] == "chr1\tgtetools\texon\t101\t300\t.\t+\t.\tID=tx1.exon1;Parent=tx1"
        assert lines[4] == "chr1\tgtetools\tfive_prime_UTR\t101\t200\t.\t+\t.\tParent=tx1"
        assert "chr1\tgtetools\ttranscript\t101\t1000\t.\t+\t.\tID=tx3;Parent=g1" in lines

    def test_source_column_from_attributes(self, gtf_file: Path) -> None:
        """Test that a source attribute fills the source column."""
        output = io.StringIO()
        with GffWriter(output, GffType.GTF) as writer:
            writer.write_genes(read_gff(gtf_file))

        lines = output.getvalue().splitlines()
        assert lines[0].startswith("chr1\tgtetools\tgene\t")
        assert lines[1].startswith("chr1\ttest\ttranscript\t")
        assert lines[2].startswith("chr1\ttest\texon\t")
        assert "source" not in lines[1].split("\t")[8]

    def test_gtf_round_trip(self, refflat_text: str) -> None:
        """Test refFlat to GTF and back."""
        output = io.StringIO()
        write_gff(read_refflat(io.StringIO(refflat_text)), output, GffType.GTF)

        transcripts = read_transcripts(output.getvalue(), GffType.GTF)

        assert to_refflat(transcripts) == refflat_text

    def test_gff3_round_trip(self, refflat_text: str) -> None:
        """Test refFlat to GFF3 and back."""
        output = io.StringIO()
        write_gff(read_refflat(io.StringIO(refflat_text)), output, GffType.GFF3)

        transcripts = read_transcripts(output.getvalue(), GffType.GFF3)

        assert to_refflat(transcripts) == refflat_text

    def test_line_count(self, refflat_file: Path, tmp_path: Path) -> None:
        """Test the number of lines written, header excluded."""
        n_written = write_gff(read_refflat(refflat_file), tmp_path / "out.gtf")

        # 2 genes, 3 transcripts, 7 exons; features only on the coding tx1 and tx2
        assert n_written == 2 + 3 + 7 + 7 + 6
