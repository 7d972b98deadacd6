"""Image acquisition from external sources.

Modules:
    base      — SourceAcquirer protocol and target planning
    download  — streaming URL download with lifecycle callbacks
    url       — URL source: download, validate, clean up on failure
    upload    — multipart upload source: parse, orient, validate
"""
