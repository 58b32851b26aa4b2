"""Strand values and strand input resolution."""

from __future__ import annotations

from enum import Enum

from gtetools.exceptions import ConflictingStrand, InvalidStrandChar, UnspecifiedStrand


class Strand(Enum):
    """Transcript orientation.

    FORWARD reads 5' to 3' along increasing coordinates, REVERSE along
    decreasing coordinates. UNKNOWN is used when the orientation is not
    determined.
    """

    FORWARD = "+"
    REVERSE = "-"
    UNKNOWN = "."

    @classmethod
    def from_char(cls, char: str) -> Strand:
        """Parse a strand character.

        Args:
            char: One of ``+ f F`` (forward), ``- r R`` (reverse), ``. ?``
                (unknown).

        Returns:
            The matching Strand.

        Raises:
            InvalidStrandChar: For any other character.
        """
        try:
            return _STRAND_CHARS[char]
        except KeyError:
            raise InvalidStrandChar(char) from None

    @property
    def char(self) -> str:
        """Canonical one-character form."""
        return self.value

    @property
    def is_stranded(self) -> bool:
        """True unless the strand is unknown."""
        return self is not Strand.UNKNOWN


_STRAND_CHARS = {
    "+": Strand.FORWARD,
    "f": Strand.FORWARD,
    "F": Strand.FORWARD,
    "-": Strand.REVERSE,
    "r": Strand.REVERSE,
    "R": Strand.REVERSE,
    ".": Strand.UNKNOWN,
    "?": Strand.UNKNOWN,
}


def resolve_strand(strand: Strand | None = None, strand_char: str | None = None) -> Strand:
    """Reconcile a typed strand and a strand character into one value.

    Args:
        strand: Strand value, if given.
        strand_char: Strand character, if given.

    Returns:
        The agreed strand.

    Raises:
        UnspecifiedStrand: If neither input is given.
        InvalidStrandChar: If the character is not a strand character.
        ConflictingStrand: If both inputs are given and disagree.
    """
    if strand is None and strand_char is None:
        raise UnspecifiedStrand()
    if strand_char is None:
        return strand
    from_char = Strand.from_char(strand_char)
    if strand is None:
        return from_char
    if strand is not from_char:
        raise ConflictingStrand(f"conflicting strand inputs specified: {strand.char!r} and {strand_char!r}")
    return strand
