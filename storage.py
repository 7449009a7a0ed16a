import os
import json
import logging
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, TextIO

logger = logging.getLogger(__name__)


def ensure_dir(path: str):
    """Create ``path`` and its parents; an empty path means the current directory."""
    if path:
        Path(path).mkdir(parents=True, exist_ok=True)


def to_record(item: Any) -> Any:
    """Dataclass items become plain dicts so json can serialize them."""
    return asdict(item) if is_dataclass(item) else item


def _write_file(out_path: str, write: Callable[[TextIO], None], label: str) -> bool:
    # Written next to the target first so a failed dump never leaves half a file behind
    target = Path(out_path)
    tmp = target.with_name(target.name + ".tmp")
    try:
        ensure_dir(str(target.parent) if target.parent != Path(".") else "")
        with tmp.open("w", encoding="utf-8") as f:
            write(f)
        os.replace(tmp, target)
        return True
    except (OSError, TypeError, ValueError) as e:
        logger.error(f"Error saving {label} to {out_path}: {e}")
        if tmp.exists():
            tmp.unlink()
        return False


def save_raw_json(data: Any, out_path: str) -> bool:
    """Dump ``data`` as one indented JSON document."""
    return _write_file(
        out_path,
        lambda f: json.dump(data, f, ensure_ascii=False, indent=2),
        "raw JSON",
    )


def save_items_jsonl(items: Iterable[Any], out_path: str) -> bool:
    """Write one JSON object per line."""

    def write(f: TextIO):
        for item in items:
            f.write(json.dumps(to_record(item), ensure_ascii=False))
            f.write("\n")

    return _write_file(out_path, write, "items JSONL")


def get_file_summary(path: str) -> Dict[str, Any]:
    target = Path(path)
    try:
        size = target.stat().st_size
        with target.open("r", encoding="utf-8") as f:
            lines = sum(1 for line in f if line.strip())
    except OSError as e:
        return {"file": path, "error": str(e)}
    return {"file": path, "size_bytes": size, "line_count": lines}
