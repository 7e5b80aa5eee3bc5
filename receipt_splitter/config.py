import yaml
from pathlib import Path
from typing import List, Optional
from .datatypes import Person

CFG_PATH = Path(__file__).parent / 'data' / 'people_bank.yaml'

def _load(path: Optional[Path] = None) -> dict:
    cfg_path = Path(path) if path is not None else CFG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"People bank config not found at {cfg_path}")
    return yaml.safe_load(cfg_path.read_text()) or {}

def load_people_bank(path: Optional[Path] = None) -> List[Person]:
    cfg = _load(path)
    out = []
    for p in cfg.get('people') or []:
        out.append(Person(id=str(p['id']), name=str(p.get('name', p['id'])), handle=p.get('handle')))
    return out

def default_currency(path: Optional[Path] = None) -> str:
    return _load(path).get('currency', 'USD')
