import json, sys
from pathlib import Path

REQUIRED = ("Tc", "beta", "structure_factor", "p")

def missing_fields(phase, sp):
    miss = []
    for fld in REQUIRED:
        if sp.get(fld, phase.get(fld)) is None:
            miss.append(fld)
    return miss

def main(path):
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    params = data.get("params", data)
    ok, todo = 0, 0
    for phase in params["phases"]:
        if not phase.get("magnetic", True):
            continue
        for sp in phase.get("species", []):
            miss = missing_fields(phase, sp)
            if miss:
                todo += 1
                print(f"[MISSING] {phase['name']}:{sp['name']}: {', '.join(miss)}")
            else:
                ok += 1
    print(f"[SUMMARY] completed={ok}, missing={todo}, total={ok + todo}")
    return todo

if __name__ == "__main__":
    sys.exit(1 if main(sys.argv[1] if len(sys.argv) > 1 else "data/magnetic/incomplete_set_demo.json") else 0)
