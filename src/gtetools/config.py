"""Configuration management for gtetools.

Configuration comes from default values, an optional YAML file and
command-line options, in increasing order of precedence.

Example:
    >>> from gtetools.config import Config
    >>> config = Config.load("gtetools.yaml")
    >>> config.io.loose_codons
    False

A configuration file mirrors the structure of ``Config.to_dict()``::

    inference:
      max_lookback: null
    io:
      gff_type: gtf
      loose_codons: false
      seq_name_prefix: chr
      strict: false
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import attrs
import yaml

from gtetools.exceptions import ConfigurationError

# =============================================================================
# Default Configuration Values
# =============================================================================

DEFAULT_GENE_ID_ATTR = "gene_id"
DEFAULT_TRANSCRIPT_ID_ATTR = "transcript_id"
GFF_TYPES = ("gtf", "gff3")


# =============================================================================
# Configuration Classes
# =============================================================================


@attrs.define
class InferenceConfig:
    """Configuration for exon feature inference.

    Attributes:
        max_lookback: Maximum number of preceding exons a reverse-strand
            codon may be split over; None for no limit.
    """

    max_lookback: int | None = None

    def validate(self) -> None:
        if self.max_lookback is not None and (not isinstance(self.max_lookback, int) or self.max_lookback < 0):
            raise ConfigurationError("inference.max_lookback must be a non-negative integer or null")


@attrs.define
class IOConfig:
    """Configuration for annotation file input.

    Attributes:
        gff_type: GFF dialect ("gtf" or "gff3"); inferred from the file
            extension if None.
        loose_codons: Tolerate transcripts with only one codon row.
        seq_name_prefix: Prefix added to every sequence name.
        seq_name_lstrip: Leading string removed from sequence names.
        gene_id_attr: GFF attribute holding the gene identifier.
        transcript_id_attr: GFF attribute holding the transcript identifier.
        strict: Abort on the first malformed record instead of skipping it.
    """

    gff_type: str | None = None
    loose_codons: bool = False
    seq_name_prefix: str | None = None
    seq_name_lstrip: str | None = None
    gene_id_attr: str = DEFAULT_GENE_ID_ATTR
    transcript_id_attr: str = DEFAULT_TRANSCRIPT_ID_ATTR
    strict: bool = False

    def validate(self) -> None:
        if self.gff_type is not None and self.gff_type not in GFF_TYPES:
            raise ConfigurationError(f"io.gff_type must be one of {', '.join(GFF_TYPES)}, got {self.gff_type!r}")
        if not self.gene_id_attr:
            raise ConfigurationError("io.gene_id_attr must not be empty")
        if not self.transcript_id_attr:
            raise ConfigurationError("io.transcript_id_attr must not be empty")


@attrs.define
class Config:
    """Main configuration container for gtetools.

    Attributes:
        inference: Feature inference configuration.
        io: File input configuration.
    """

    inference: InferenceConfig = attrs.Factory(InferenceConfig)
    io: IOConfig = attrs.Factory(IOConfig)

    @classmethod
    def load(cls, path: Path | str | None = None) -> Config:
        """Load configuration from a YAML file.

        Args:
            path: Path to the configuration file. If None, returns the
                default configuration.

        Returns:
            Loaded and validated configuration.

        Raises:
            ConfigurationError: If the file is missing or invalid.
        """
        if path is None:
            return cls()

        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML configuration file {path}: {e}") from e

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Create a configuration from a nested dictionary.

        Raises:
            ConfigurationError: On unknown sections or keys, or invalid
                values.
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration must be a mapping")

        sections = {"inference": InferenceConfig, "io": IOConfig}
        unknown = set(data) - set(sections)
        if unknown:
            raise ConfigurationError(f"Unknown configuration section(s): {', '.join(sorted(unknown))}")

        kwargs = {}
        for name, section_cls in sections.items():
            values = data.get(name) or {}
            if not isinstance(values, dict):
                raise ConfigurationError(f"Configuration section {name!r} must be a mapping")
            known = {field.name for field in attrs.fields(section_cls)}
            unknown = set(values) - known
            if unknown:
                raise ConfigurationError(f"Unknown key(s) in {name!r}: {', '.join(sorted(unknown))}")
            kwargs[name] = section_cls(**values)

        config = cls(**kwargs)
        config.validate()
        return config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation of configuration.
        """
        return attrs.asdict(self)

    def save(self, path: Path | str) -> None:
        """Save configuration to a YAML file.

        Args:
            path: Path to save configuration file.
        """
        with open(path, "w") as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def validate(self) -> None:
        """Validate all sections.

        Raises:
            ConfigurationError: On the first invalid value.
        """
        self.inference.validate()
        self.io.validate()
