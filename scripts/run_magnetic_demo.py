import argparse
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT / "src"))

from thermomag.magnetic import build_magnetic_gibbs_term  # type: ignore

DEFAULT_COMPOSITION = {
    "BCC_A2": {"Fe": 0.7, "Ni": 0.3},
    "FCC_A1": {"Fe": 0.4, "Ni": 0.6},
}


def main():
    parser = argparse.ArgumentParser(description="Evaluate Hillert-Jarl magnetic Gibbs energies from a JSON model")
    parser.add_argument("--model", type=Path, default=ROOT / "data/magnetic/fe_ni_demo.json", help="Magnetic model JSON")
    parser.add_argument("--T", type=float, default=800.0, help="Temperature [K]")
    parser.add_argument("--composition", type=str, default=None, help='JSON {phase: {species: x}}')
    parser.add_argument("--verbose", action="store_true", help="Log per-phase evaluation details")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    composition = json.loads(args.composition) if args.composition else DEFAULT_COMPOSITION
    term = build_magnetic_gibbs_term(args.model)
    out = term.state(args.T, composition)

    for (phase, species), value in zip(out["species"], out["energy"]):
        print(f"[species] {phase}:{species}  G_mag/RT = {value:.10g}")
    for phase, info in out["phases"].items():
        if info["regime"] is None:
            print(f"[phase] {phase}: Tc = 0, no magnetic contribution")
            continue
        print(
            f"[phase] {phase}: Tc={info['Tc']:.6g} K  B={info['B']:.6g}  tau={info['tau']:.6g} "
            f"({info['regime']})  G_mag={info['G_molar']:.6g} J/mol"
        )


if __name__ == "__main__":
    main()
