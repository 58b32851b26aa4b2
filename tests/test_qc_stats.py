"""Unit tests for gtetools.qc.stats module."""

import json
from pathlib import Path

from gtetools.io.refflat import read_refflat
from gtetools.qc.stats import AnnotationStats, LengthSummary, collect_stats


class TestLengthSummary:
    """Tests for LengthSummary."""

    def test_from_values(self) -> None:
        summary = LengthSummary.from_values([100, 300, 200, 400])

        assert summary.count == 4
        assert summary.total == 1000
        assert summary.mean == 250.0
        assert summary.median == 250.0
        assert (summary.min, summary.max) == (100, 400)

    def test_empty(self) -> None:
        """Test that an empty summary has no distribution values."""
        summary = LengthSummary.from_values([])

        assert summary.count == 0
        assert summary.mean is None
        assert summary.max is None


class TestCollectStats:
    """Tests for collect_stats."""

    def test_counts(self, refflat_file: Path) -> None:
        """Test gene, transcript and exon counts."""
        stats = collect_stats(read_refflat(refflat_file))

        assert stats.n_genes == 2
        assert stats.n_transcripts == 3
        assert stats.n_coding_transcripts == 2
        assert stats.n_exons == 7
        assert stats.strand_counts == {"+": 2, "-": 1, ".": 0}

    def test_lengths(self, refflat_file: Path) -> None:
        """Test the length distributions."""
        stats = collect_stats(read_refflat(refflat_file))

        assert stats.transcripts_per_gene.mean == 1.5
        assert stats.exons_per_transcript.max == 3
        assert stats.transcript_lengths.total == 1600
        assert stats.cds_lengths.mean == 205.0
        assert stats.exon_lengths.count == 7
        assert stats.intron_lengths.count == 4
        assert stats.intron_lengths.total == 1100

    def test_exon_footprint(self, refflat_file: Path) -> None:
        """Test that overlapping exons of different transcripts count once."""
        stats = collect_stats(read_refflat(refflat_file))

        assert stats.exon_footprint == 600 + 500

    def test_empty(self) -> None:
        stats = collect_stats([])

        assert stats == AnnotationStats()
        assert stats.cds_lengths.count == 0

    def test_to_dict_is_json_serializable(self, refflat_file: Path) -> None:
        """Test that statistics can be dumped as JSON."""
        data = collect_stats(read_refflat(refflat_file)).to_dict()

        assert json.loads(json.dumps(data))["cds_lengths"]["count"] == 2
