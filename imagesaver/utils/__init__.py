"""Shared helpers.

Modules:
    fs     — best-effort file cleanup
    image  — probing, encoding, validation and EXIF orientation
"""
