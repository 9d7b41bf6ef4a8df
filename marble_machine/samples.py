"""Bundled sample programs."""

from __future__ import annotations

from textwrap import dedent

_SAMPLES_RAW = {
    "fib": """
        >>00##01<<
        ^^oo##  ^^
        ^^  +>  ^^
        ^^  ##oo^^
        ^^  <+  ^^
        ^^<<##>>^^
        ##########
    """,
    "countdown": """
        0a
        --:>oo
        ""  xx
        xx
    """,
}

SAMPLES: dict[str, str] = {
    name: dedent(source).strip("\n") for name, source in _SAMPLES_RAW.items()
}
"""Sample name -> program source."""


def get_sample(name: str) -> str:
    try:
        return SAMPLES[name]
    except KeyError as exc:
        valid = ", ".join(sorted(SAMPLES))
        raise ValueError(f"sample must be one of {valid}") from exc
