"""Solver-facing magnetic Gibbs-energy interface built on the Hillert-Jarl model."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np

from thermomag.common.exceptions import MissingPropertyData

from .impl import hillert_jarl
from .impl.hillert_jarl_model import Composition, MagneticSystem
from .impl.loader import load_model_from_json


@dataclass
class MagneticGibbsTerm:
    """Per-species magnetic energies plus per-phase diagnostics for one equilibrium iteration."""

    system: MagneticSystem

    def state(self, T: float, composition: Composition, energy: Optional[np.ndarray] = None) -> Dict[str, Any]:
        if energy is None:
            energy = np.zeros(self.system.n_species)
        params_by_phase = self.system.evaluate_phases(T, composition, energy)

        phases: Dict[str, Dict[str, Any]] = {}
        for name, params in params_by_phase.items():
            if params is None:
                phases[name] = {"regime": None, "G_RT": 0.0, "G_molar": 0.0}
                continue
            phases[name] = {
                "Tc": params.critical_temperature,
                "B": params.magnetic_moment,
                "tau": params.tau,
                "regime": params.regime,
                "antiferromagnetic": params.antiferromagnetic,
                "g": params.g,
                "G_RT": hillert_jarl.integral_energy(params),
                "G_molar": hillert_jarl.molar_gibbs_energy(params),
            }

        return {
            "T": T,
            "energy": energy,
            "species": self.system.species_labels(),
            "phases": phases,
        }

    def species_energy(self, T: float, composition: Composition, phase: str, species: str) -> float:
        energy = self.system.evaluate(T, composition)
        rng = self.system.species_range(phase)
        names = self.system.phases[self.system.phase_index(phase)].species
        if species not in names:
            raise MissingPropertyData(f"Species '{species}' not in phase '{phase}'")
        return float(energy[rng.first + names.index(species)])


def _coerce_path(path: Union[str, Path]) -> Path:
    return path if isinstance(path, Path) else Path(path)


def load_magnetic_system(json_path: Union[str, Path]) -> MagneticSystem:
    model = load_model_from_json(str(_coerce_path(json_path)))
    if not isinstance(model, MagneticSystem):
        raise TypeError("Magnetic JSON did not yield a MagneticSystem instance")
    return model


def build_magnetic_gibbs_term(json_path: Union[str, Path]) -> MagneticGibbsTerm:
    return MagneticGibbsTerm(system=load_magnetic_system(json_path))
