"""Configuration for the Info lock transition."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FinalizeConfig:
    """Knobs for ``InfoBuilder.finalize``."""

    fraction_tolerance: float = 1e-6
    derive_composition: bool = True
    check_composition_consistency: bool = True
    dspacing_tolerance: float = 1e-9
