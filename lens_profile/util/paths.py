from pathlib import Path
import os


def resolve_out_dir(out_dir: str, base: Path) -> Path:
    # allow paths relative to the config file and ~ expansion
    p = Path(os.path.expanduser(out_dir))
    if not p.is_absolute():
        p = (base / p).resolve()
    return p


def ensure_dir(p: Path):
    p.mkdir(parents=True, exist_ok=True)
