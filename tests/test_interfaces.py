import math
from pathlib import Path

import numpy as np
import pytest

from thermomag.common.exceptions import MissingPropertyData
from thermomag.magnetic import MagneticGibbsTerm, build_magnetic_gibbs_term, load_magnetic_system
from thermomag.magnetic.impl import registry

DEMO = Path(__file__).resolve().parents[1] / "data" / "magnetic" / "fe_ni_demo.json"

COMPOSITION = {
    "BCC_A2": {"Fe": 0.7, "Ni": 0.3},
    "FCC_A1": {"Fe": 0.4, "Ni": 0.6},
}


def test_state_reports_species_and_phases():
    term = build_magnetic_gibbs_term(DEMO)
    out = term.state(800.0, COMPOSITION)
    assert out["T"] == 800.0
    assert len(out["species"]) == len(out["energy"]) == 6
    assert set(out["phases"]) == {"BCC_A2", "FCC_A1"}

    bcc = out["phases"]["BCC_A2"]
    assert bcc["regime"] == "ordered"
    assert abs(bcc["Tc"] - 902.6) < 1e-9
    assert abs(bcc["G_RT"] - math.log(1.0 + bcc["B"]) * bcc["g"]) < 1e-14

    # 0.4*(-67) + 0.6*633 > 0, so no Neel correction for this composition
    fcc = out["phases"]["FCC_A1"]
    assert not fcc["antiferromagnetic"]
    assert abs(fcc["Tc"] - (0.4 * -67.0 + 0.6 * 633.0)) < 1e-9
    assert fcc["regime"] == "paramagnetic"


def test_state_zero_tc_phase():
    term = build_magnetic_gibbs_term(str(DEMO))
    energy = np.full(6, 1.5)
    out = term.state(800.0, {"BCC_A2": {"Fe": 0.7, "Ni": 0.3}}, energy)
    assert out["energy"] is energy
    assert out["phases"]["FCC_A1"] == {"regime": None, "G_RT": 0.0, "G_molar": 0.0}
    assert energy[4] == 1.5


def test_species_energy():
    term = MagneticGibbsTerm(system=load_magnetic_system(DEMO))
    value = term.species_energy(800.0, COMPOSITION, "BCC_A2", "Ni")
    assert abs(value - 0.16370464847880101) < 1e-10
    with pytest.raises(MissingPropertyData):
        term.species_energy(800.0, COMPOSITION, "BCC_A2", "Co")


def test_load_magnetic_system_rejects_other_models(tmp_path, monkeypatch):
    class ConstantTerm:
        n_species = 1

        def evaluate(self, T, X, energy=None):
            return np.zeros(1)

    monkeypatch.setitem(registry.REGISTRY, "constant_term", lambda params: ConstantTerm())
    path = tmp_path / "other.json"
    path.write_text('{"model": "constant_term", "params": {}}', encoding="utf-8")
    with pytest.raises(TypeError):
        load_magnetic_system(path)
