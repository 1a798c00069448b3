import json
from pathlib import Path

from thermomag.common.exceptions import MissingPropertyData

# explicit import triggers registration
from . import hillert_jarl_model  # hillert_jarl

from .registry import build

def load_model_from_json(json_path: str):
    p = Path(json_path)
    data = json.loads(p.read_text(encoding="utf-8"))
    if "model" not in data:
        raise MissingPropertyData(f"No 'model' key in {p}")
    # accepts both {model, params} and {model, phases, ...}
    params = data.get("params", data)
    return build(data["model"], params)
