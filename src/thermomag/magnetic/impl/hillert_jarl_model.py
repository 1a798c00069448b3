"""
Multi-phase Hillert-Jarl model built from JSON parameters.

Species of all phases share one global index space; each phase owns a
contiguous block of it. ``MagneticSystem.evaluate`` calls the kernel once per
magnetic phase, so entries of non-magnetic phases are never written.
"""
from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from thermomag.common.exceptions import (
    InconsistentPhaseCoefficients,
    InvalidExponent,
    InvalidMagneticParameters,
    MissingPropertyData,
)

from . import hillert_jarl
from .hillert_jarl import MagneticCoefficients, MagneticPhaseParameters, SpeciesRange
from .registry import register
from ..utils.units import assert_unit

logger = logging.getLogger(__name__)

Composition = Union[Mapping[str, Mapping[str, float]], Sequence[float], np.ndarray]


@dataclass
class MagneticPhase:
    name: str
    species: List[str]
    coefficients: List[MagneticCoefficients]
    magnetic: bool = True

    @staticmethod
    def from_params(params: Dict[str, Any]) -> "MagneticPhase":
        name = params["name"]
        magnetic = bool(params.get("magnetic", True))
        species = params.get("species") or []
        if not species:
            raise MissingPropertyData(f"Phase '{name}' lists no species")

        names: List[str] = []
        rows: List[MagneticCoefficients] = []
        for sp in species:
            names.append(sp["name"])
            if not magnetic:
                # never handed to the kernel
                rows.append(MagneticCoefficients(0.0, 0.0, 0.0, 0.0))
                continue
            # structure factor and p may be given once per phase or repeated per species
            S = sp.get("structure_factor", params.get("structure_factor"))
            p = sp.get("p", params.get("p"))
            missing = [k for k, v in (("Tc", sp.get("Tc")), ("beta", sp.get("beta")), ("structure_factor", S), ("p", p)) if v is None]
            if missing:
                raise MissingPropertyData(
                    f"Magnetic data for species '{sp['name']}' in phase '{name}' missing: {', '.join(missing)}"
                )
            rows.append(MagneticCoefficients(float(sp["Tc"]), float(sp["beta"]), float(S), float(p)))

        phase = MagneticPhase(name=name, species=names, coefficients=rows, magnetic=magnetic)
        if magnetic:
            phase.check_uniform()
        return phase

    def check_uniform(self) -> None:
        """Structure factor and p must be identical across the phase's species."""
        first = self.coefficients[0]
        # NaN never compares equal to itself
        if first.p == 0.0 or not math.isfinite(first.p):
            raise InvalidExponent(f"Phase '{self.name}': structure exponent p must be finite and non-zero, got {first.p}")
        if not math.isfinite(first.structure_factor):
            raise InvalidMagneticParameters(
                f"Phase '{self.name}': structure factor must be finite, got {first.structure_factor}"
            )
        for sp_name, c in zip(self.species, self.coefficients):
            if c.structure_factor != first.structure_factor or c.p != first.p:
                raise InconsistentPhaseCoefficients(
                    f"Phase '{self.name}': species '{sp_name}' has structure_factor={c.structure_factor}, "
                    f"p={c.p}; expected {first.structure_factor}, {first.p}"
                )


@dataclass
class MagneticSystem:
    phases: List[MagneticPhase]
    counts: List[int] = field(init=False)
    table: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        counts: List[int] = []
        rows: List[MagneticCoefficients] = []
        total = 0
        for ph in self.phases:
            total += len(ph.species)
            counts.append(total)
            rows.extend(ph.coefficients)
        self.counts = counts
        self.table = hillert_jarl.coefficient_table(rows)

    @staticmethod
    def from_params(params: Dict[str, Any]) -> "MagneticSystem":
        if not params.get("phases"):
            raise MissingPropertyData("Magnetic model parameters list no phases")
        return MagneticSystem(phases=[MagneticPhase.from_params(ph) for ph in params["phases"]])

    @property
    def n_species(self) -> int:
        return self.counts[-1] if self.counts else 0

    def species_labels(self) -> List[Tuple[str, str]]:
        return [(ph.name, sp) for ph in self.phases for sp in ph.species]

    def phase_index(self, phase: Union[int, str]) -> int:
        if isinstance(phase, numbers.Integral):
            return int(phase)
        for k, ph in enumerate(self.phases):
            if ph.name == phase:
                return k
        raise KeyError(f"Phase '{phase}' not in magnetic model")

    def species_range(self, phase: Union[int, str]) -> SpeciesRange:
        return SpeciesRange.from_counts(self.counts, self.phase_index(phase))

    def mole_fraction_vector(self, X: Composition) -> np.ndarray:
        """Global mole-fraction vector from {phase: {species: x}} or a flat sequence.

        Missing entries read as zero; fractions are used as given, not normalised.
        """
        if isinstance(X, Mapping):
            x = np.zeros(self.n_species)
            for k, ph in enumerate(self.phases):
                comp = X.get(ph.name, {})
                first = self.counts[k] - len(ph.species)
                for j, sp in enumerate(ph.species):
                    x[first + j] = float(comp.get(sp, 0.0))
            return x
        x = np.asarray(X, dtype=float)
        if x.shape != (self.n_species,):
            raise ValueError(f"Mole-fraction vector must have length {self.n_species}, got shape {x.shape}")
        return x

    def evaluate_phase(
        self,
        phase: Union[int, str],
        T: float,
        x: np.ndarray,
        energy: np.ndarray,
    ) -> Optional[MagneticPhaseParameters]:
        k = self.phase_index(phase)
        rng = self.species_range(k)
        ph = self.phases[k]
        if not ph.magnetic:
            raise MissingPropertyData(f"Phase '{ph.name}' carries no magnetic coefficients")
        logger.debug("Magnetic term for phase %s (species %d..%d) at T=%g K", ph.name, rng.first, rng.last, T)
        try:
            return hillert_jarl.evaluate(rng, self.table, x, T, energy)
        except InvalidMagneticParameters as exc:
            logger.warning("Magnetic evaluation rejected for phase %s: %s", ph.name, exc)
            raise

    def evaluate_phases(
        self,
        T: float,
        X: Composition,
        energy: np.ndarray,
    ) -> Dict[str, Optional[MagneticPhaseParameters]]:
        """Evaluate every magnetic phase in order, writing into ``energy``."""
        x = self.mole_fraction_vector(X)
        out: Dict[str, Optional[MagneticPhaseParameters]] = {}
        for k, ph in enumerate(self.phases):
            if ph.magnetic:
                out[ph.name] = self.evaluate_phase(k, T, x, energy)
        return out

    def evaluate(self, T: float, X: Composition, energy: Optional[np.ndarray] = None) -> np.ndarray:
        """Per-species magnetic energy (units of RT).

        Without ``energy`` a zero-filled vector is allocated, so species of
        skipped or non-magnetic phases read 0.0; a caller-supplied vector keeps
        its entries for those species.
        """
        if energy is None:
            energy = np.zeros(self.n_species)
        self.evaluate_phases(T, X, energy)
        return energy

    def phase_energies(self, T: float, X: Composition) -> Dict[str, Dict[str, float]]:
        """Integral molar magnetic energy of each magnetic phase."""
        scratch = np.zeros(self.n_species)
        out: Dict[str, Dict[str, float]] = {}
        for name, params in self.evaluate_phases(T, X, scratch).items():
            if params is None:
                out[name] = {"G_RT": 0.0, "G_molar": 0.0}
            else:
                out[name] = {
                    "G_RT": hillert_jarl.integral_energy(params),
                    "G_molar": hillert_jarl.molar_gibbs_energy(params),
                }
        return out


@register("hillert_jarl")
def build_hillert_jarl_system(params: Dict[str, Any]) -> MagneticSystem:
    assert_unit(params.get("T_unit", "K"), "K", "temperature")
    return MagneticSystem.from_params(params)
