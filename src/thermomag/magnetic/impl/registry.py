from typing import Any, Callable, Dict, Optional, Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class MagneticModel(Protocol):
    """Magnetic Gibbs-energy model over a global species index space.

    ``evaluate`` takes T [K] and mole fractions and returns (or fills) the
    per-species magnetic energy in units of RT, one entry per species.
    """
    n_species: int

    def evaluate(self, T: float, X: Any, energy: Optional[np.ndarray] = None) -> np.ndarray: ...

REGISTRY: Dict[str, Callable[[Dict[str, Any]], MagneticModel]] = {}  # name -> factory(params)

def register(name: str):
    def deco(fn):
        REGISTRY[name] = fn
        return fn
    return deco

def build(name: str, params: dict) -> MagneticModel:
    if name not in REGISTRY:
        raise KeyError(f"Magnetic model '{name}' not registered (known: {', '.join(sorted(REGISTRY))})")
    model = REGISTRY[name](params)
    # factories must hand back something the solver can fill an energy vector from
    if not isinstance(model, MagneticModel):
        raise TypeError(f"Factory for '{name}' returned {type(model).__name__}, not a MagneticModel")
    return model
