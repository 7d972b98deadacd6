"""Post-acquisition processing.

Modules:
    pipeline   — Pipeline, a chainable Pillow transformer (bytes -> bytes)
    overlay    — text overlay rendering and compositing
    processor  — transform, fix the extension after format drift, overlay
"""
