"""
Hillert-Jarl magnetic ordering contribution for one solution phase.

Form (Hillert & Jarl, CALPHAD 2 (1978) 227; Dinsdale, CALPHAD 15 (1991) 317):
  dG_mag/(RT) = ln(1 + B) g(tau),   tau = T/Tc
  g(tau) = 1 - [79/(140 p tau) + 474/497 (1/p - 1)(tau^3/6 + tau^9/135 + tau^15/600)] / D,  tau <= 1
  g(tau) = -[tau^-5/10 + tau^-15/315 + tau^-25/1500] / D,                                    tau >  1
  D = 518/1125 + 11692/15975 (1/p - 1)
Tc and B are mole-fraction weighted sums of the species coefficients of the phase.
The value written per species is the partial (per-constituent) quantity
  g (B_i - B)/(1 + B) + ln(1 + B) (tempDiff_i + g)
where tempDiff_i carries the Tc_i - Tc derivative term of the active branch.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from thermomag.common.exceptions import (
    InvalidExponent,
    InvalidMagneticMoment,
    InvalidMagneticParameters,
    NonContiguousOrEmptyRange,
)

from ..utils.units import R_J_PER_MOL_K

logger = logging.getLogger(__name__)

# column layout of the (n_species, 4) coefficient table
TC, BETA, STRUCTURE_FACTOR, P = 0, 1, 2, 3

PARAMAGNETIC = "paramagnetic"  # tau > 1
ORDERED = "ordered"            # tau <= 1


@dataclass(frozen=True)
class MagneticCoefficients:
    critical_temperature: float
    magnetic_moment: float
    structure_factor: float
    p: float

    def as_row(self) -> Tuple[float, float, float, float]:
        return (self.critical_temperature, self.magnetic_moment, self.structure_factor, self.p)


def coefficient_table(rows: Sequence[MagneticCoefficients]) -> np.ndarray:
    """Stack per-species coefficients into the (n_species, 4) float64 table."""
    return np.array([r.as_row() for r in rows], dtype=float).reshape(-1, 4)


@dataclass(frozen=True)
class SpeciesRange:
    """Inclusive block [first, last] of zero-based species indices owned by one phase."""

    first: int
    last: int

    def __post_init__(self):
        if self.first < 0 or self.last < self.first:
            raise NonContiguousOrEmptyRange(
                f"Species range [{self.first}, {self.last}] is empty or reversed"
            )

    @classmethod
    def from_counts(cls, counts: Sequence[int], phase_index: int) -> "SpeciesRange":
        """Resolve a phase's range from cumulative species counts.

        ``counts[k]`` is the number of species in phases 0..k, so phase k owns
        indices ``counts[k-1] .. counts[k]-1`` (phase 0 starts at 0).
        """
        if not 0 <= phase_index < len(counts):
            raise NonContiguousOrEmptyRange(
                f"Phase index {phase_index} outside 0..{len(counts) - 1}"
            )
        first = int(counts[phase_index - 1]) if phase_index > 0 else 0
        return cls(first=first, last=int(counts[phase_index]) - 1)

    def __len__(self) -> int:
        return self.last - self.first + 1

    def as_slice(self) -> slice:
        return slice(self.first, self.last + 1)

    def check_bounds(self, size: int, what: str) -> None:
        if self.last >= size:
            raise NonContiguousOrEmptyRange(
                f"Species range [{self.first}, {self.last}] exceeds {what} of length {size}"
            )


@dataclass(frozen=True)
class MagneticPhaseParameters:
    """Phase-level quantities shared by every species of one evaluation."""

    critical_temperature: float
    magnetic_moment: float
    temperature: float
    p: float
    tau: float
    D: float
    g: float
    slope: float
    regime: str
    antiferromagnetic: bool = False


def aggregate(coefficients: np.ndarray, mole_fractions: np.ndarray) -> Tuple[float, float]:
    """Mole-fraction weighted critical temperature and mean magnetic moment (no normalisation)."""
    x = np.asarray(mole_fractions, dtype=float)
    tc = float(np.dot(x, coefficients[:, TC]))
    beta = float(np.dot(x, coefficients[:, BETA]))
    return tc, beta


def correct_antiferromagnetic(tc: float, beta: float, structure_factor: float) -> Tuple[float, float, bool]:
    """Undo the ChemSage storage convention for Neel temperatures.

    Antiferromagnetic critical temperatures are stored as negative values
    divided by the structure factor; both aggregates are negated and rescaled.
    """
    if tc < 0.0:
        return -tc * structure_factor, -beta * structure_factor, True
    return tc, beta, False


def normalization_constant(p: float) -> float:
    return 518.0 / 1125.0 + (11692.0 / 15975.0) * (1.0 / p - 1.0)


def paramagnetic_terms(tau: float, critical_temperature: float, D: float) -> Tuple[float, float]:
    """(g, slope) above the ordering temperature, tau > 1."""
    t5 = tau ** (-5)
    t15 = t5 ** 3
    t25 = t5 * t5 * t15
    slope = (1.0 / (D * critical_temperature)) * (t5 / 2.0 + t15 / 21.0 + t25 / 60.0)
    g = -(t5 / 10.0 + t15 / 315.0 + t25 / 1500.0) / D
    return g, slope


def ordered_terms(tau: float, critical_temperature: float, temperature: float, p: float, D: float) -> Tuple[float, float]:
    """(g, slope) at or below the ordering temperature, tau <= 1.

    Unlike the paramagnetic branch the slope carries a leading -79/(140 p T)
    term, and it is paired with (Tc_i - Tc) instead of (Tc - Tc_i).
    """
    inv_p_minus_one = 1.0 / p - 1.0
    t3 = tau ** 3
    t9 = t3 ** 3
    t15 = t3 * t3 * t9
    slope = -79.0 / (140.0 * p * temperature)
    slope += (474.0 / (497.0 * critical_temperature)) * inv_p_minus_one * (t3 / 2.0 + t9 / 15.0 + t15 / 40.0)
    slope /= D
    g = 1.0 - (
        79.0 / (140.0 * p * tau)
        + (474.0 / 497.0) * inv_p_minus_one * (t3 / 6.0 + t9 / 135.0 + t15 / 600.0)
    ) / D
    return g, slope


def species_temperature_terms(params: MagneticPhaseParameters, species_tc):
    """tempDiff per species; the sign of (Tc - Tc_i) flips between regimes."""
    species_tc = np.asarray(species_tc, dtype=float)
    if params.regime == PARAMAGNETIC:
        return (params.critical_temperature - species_tc) * params.slope
    return (species_tc - params.critical_temperature) * params.slope


def compose_species_energy(g: float, temp_diff, moment, mean_moment: float):
    """Per-species energy from the shared g/B and the branch-specific tempDiff."""
    moment = np.asarray(moment, dtype=float)
    return g * ((moment - mean_moment) / (1.0 + mean_moment)) + math.log(1.0 + mean_moment) * (temp_diff + g)


def _validate_inputs(species_range: SpeciesRange, coefficients, mole_fractions, temperature: float):
    coefficients = np.asarray(coefficients, dtype=float)
    mole_fractions = np.asarray(mole_fractions, dtype=float)
    if coefficients.ndim != 2 or coefficients.shape[1] != 4:
        raise InvalidMagneticParameters(
            f"Coefficient table must have shape (n_species, 4), got {coefficients.shape}"
        )
    species_range.check_bounds(coefficients.shape[0], "coefficient table")
    species_range.check_bounds(mole_fractions.shape[0], "mole-fraction vector")
    if not math.isfinite(temperature) or temperature <= 0.0:
        raise InvalidMagneticParameters(f"Temperature must be finite and > 0 K, got {temperature}")
    return coefficients, mole_fractions


def phase_parameters(
    species_range: SpeciesRange,
    coefficients,
    mole_fractions,
    temperature: float,
) -> Optional[MagneticPhaseParameters]:
    """Shared Hillert-Jarl quantities of one phase, or None when Tc is exactly zero."""
    coefficients, mole_fractions = _validate_inputs(species_range, coefficients, mole_fractions, temperature)
    sl = species_range.as_slice()
    block = coefficients[sl]

    # structure factor and p are the same for all constituents of the phase
    structure_factor = float(block[0, STRUCTURE_FACTOR])
    p = float(block[0, P])
    if p == 0.0 or not math.isfinite(p):
        raise InvalidExponent(f"Structure exponent p must be finite and non-zero, got {p}")
    if not math.isfinite(structure_factor):
        raise InvalidMagneticParameters(f"Structure factor must be finite, got {structure_factor}")

    tc, beta = aggregate(block, mole_fractions[sl])
    tc, beta, afm = correct_antiferromagnetic(tc, beta, structure_factor)
    # the Neel rescaling can overflow a finite stored value
    if not (math.isfinite(tc) and math.isfinite(beta)):
        raise InvalidMagneticParameters(f"Non-finite Tc={tc}, B={beta} after aggregation")

    if tc == 0.0:
        logger.debug("Tc = 0 for species %d..%d; no magnetic contribution", species_range.first, species_range.last)
        return None
    if beta <= -1.0:
        raise InvalidMagneticMoment(f"Mean magnetic moment B={beta} must be > -1")

    tau = temperature / tc
    D = normalization_constant(p)
    if tau > 1.0:
        regime = PARAMAGNETIC
        g, slope = paramagnetic_terms(tau, tc, D)
    else:
        regime = ORDERED
        g, slope = ordered_terms(tau, tc, temperature, p, D)
    logger.debug("Tc=%g B=%g tau=%g regime=%s", tc, beta, tau, regime)

    return MagneticPhaseParameters(
        critical_temperature=tc,
        magnetic_moment=beta,
        temperature=float(temperature),
        p=p,
        tau=tau,
        D=D,
        g=g,
        slope=slope,
        regime=regime,
        antiferromagnetic=afm,
    )


def evaluate(
    species_range: SpeciesRange,
    coefficients,
    mole_fractions,
    temperature: float,
    energy: np.ndarray,
) -> Optional[MagneticPhaseParameters]:
    """Write the magnetic Gibbs energy (units of RT) of every species in ``species_range``.

    Only ``energy[first:last+1]`` is written; nothing is written when the
    corrected critical temperature is exactly zero. Inputs are validated before
    the first write, so a rejected phase leaves ``energy`` as it was.
    """
    if not isinstance(energy, np.ndarray):
        raise TypeError("energy must be a numpy array owned by the caller")
    species_range.check_bounds(energy.shape[0], "energy vector")
    params = phase_parameters(species_range, coefficients, mole_fractions, temperature)
    if params is None:
        return None

    block = np.asarray(coefficients, dtype=float)[species_range.as_slice()]
    temp_diff = species_temperature_terms(params, block[:, TC])
    energy[species_range.as_slice()] = compose_species_energy(
        params.g, temp_diff, block[:, BETA], params.magnetic_moment
    )
    return params


def integral_energy(params: MagneticPhaseParameters) -> float:
    """Phase molar magnetic Gibbs energy divided by RT: ln(1 + B) g(tau)."""
    return math.log(1.0 + params.magnetic_moment) * params.g


def molar_gibbs_energy(params: MagneticPhaseParameters) -> float:
    """Phase molar magnetic Gibbs energy [J/mol]."""
    return R_J_PER_MOL_K * params.temperature * integral_energy(params)
