"""Write a script's content to disk under its own name."""

import logging
from pathlib import Path
from typing import Optional

from src.store.models import Script

__all__ = ["export_script"]

logger = logging.getLogger(__name__)


def export_script(script: Script, output_dir: Optional[str] = None) -> Path:
    """Write *script* to <output_dir>/<script.name> (default: cwd) and return the path."""
    out_dir = Path(output_dir).expanduser() if output_dir else Path.cwd()
    out_dir.mkdir(parents=True, exist_ok=True)
    safe = "".join(c if c.isalnum() or c in "-_." else "_" for c in script.name)
    out_path = out_dir / safe
    out_path.write_text(script.content, encoding="utf-8")
    logger.info("Exported %s to %s", script.name, out_path)
    return out_path
