"""Centralized domain constants for the marble machine.

Glyphs, value ranges and host defaults that appear across multiple modules
are defined here. Consuming modules should import from this module rather
than defining their own inline literals.
"""

from __future__ import annotations

CELL_WIDTH = 2
"""Number of source characters per grid cell."""

BYTE_MODULUS = 256
"""Marble values wrap modulo this after every effect phase."""

AIR_GLYPHS: tuple[str, ...] = ("  ", "..")
"""Source glyphs that compile to Air."""

AIR_RENDER = "··"
"""Render glyph for Air cells."""

ERROR_RENDER = "!!"
"""Render glyph for cells built from unrecognized source chunks."""

DIRECTION_MARKERS: tuple[str, ...] = ("^", "v", "<", ">")
"""Characters that encode a facing on directional cells."""

LABEL_PREFIX = "@"
"""First character of a label glyph; the second is its key."""

TELEPORTER_PREFIX = "&"
"""First character of a teleporter glyph; the second is its key."""

KEY_CHARACTERS = "0123456789abcdefghijklmnopqrstuvwxyz"
"""Base-36 alphabet of label and teleporter keys."""

MAX_STEPS = 1_000
"""Default cap on cycles the host runner executes."""

FLUSH_THRESHOLD = 8_192
"""Flush trace rows to Parquet once this in-memory row count is reached."""
