"""Convenience exports for the magnetic Gibbs-energy contribution."""

from .impl.hillert_jarl import (
    MagneticCoefficients,
    MagneticPhaseParameters,
    SpeciesRange,
    evaluate,
    phase_parameters,
)
from .impl.hillert_jarl_model import MagneticPhase, MagneticSystem
from .interfaces import (
    MagneticGibbsTerm,
    build_magnetic_gibbs_term,
    load_magnetic_system,
)

__all__ = [
    "MagneticCoefficients",
    "MagneticGibbsTerm",
    "MagneticPhase",
    "MagneticPhaseParameters",
    "MagneticSystem",
    "SpeciesRange",
    "build_magnetic_gibbs_term",
    "evaluate",
    "load_magnetic_system",
    "phase_parameters",
]
