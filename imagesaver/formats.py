"""Extension <-> encoded format mapping.

File extensions and codec format names mostly coincide (``png`` is ``png``),
but not always. The exceptions live in the tables below so the mapping can be
audited and extended in one place.
"""

from __future__ import annotations

# Extension -> format name, for extensions whose format is spelled differently.
EXTENSION_TO_FORMAT: dict[str, str] = {
    "jpg": "jpeg",
}

# Format name -> preferred extension (inverse of the table above).
FORMAT_TO_EXTENSION: dict[str, str] = {fmt: ext for ext, fmt in EXTENSION_TO_FORMAT.items()}

# Codec-reported names that are stored as another format.
# Pillow reports multi-picture JPEGs from cameras as MPO.
FORMAT_ALIASES: dict[str, str] = {
    "mpo": "jpeg",
}


def normalize_format(fmt: str) -> str:
    """Lower-case a codec format name and resolve codec aliases."""
    fmt = fmt.lower()
    return FORMAT_ALIASES.get(fmt, fmt)


def format_for_extension(extension: str) -> str:
    """Format implied by a file extension (``jpg`` -> ``jpeg``)."""
    extension = extension.lower().lstrip(".")
    return EXTENSION_TO_FORMAT.get(extension, extension)


def extension_for_format(fmt: str) -> str:
    """Extension to use for an encoded format (``jpeg`` -> ``jpg``)."""
    fmt = normalize_format(fmt)
    return FORMAT_TO_EXTENSION.get(fmt, fmt)


def formats_match(extension: str, fmt: str) -> bool:
    """True if a file with ``extension`` may legitimately hold ``fmt`` data."""
    return format_for_extension(extension) == normalize_format(fmt)
