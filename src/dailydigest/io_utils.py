from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

import orjson

from .errors import WriteError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def backup_path_for(path: PathLike) -> Path:
    """data/x.json -> data/x.prev.json"""
    p = Path(path)
    return p.with_name(f"{p.stem}.prev{p.suffix}")


def read_json_document(path: PathLike) -> Dict[str, Any]:
    with open(path, "rb") as f:
        return orjson.loads(f.read())


def write_json_document(path: PathLike, payload: Dict[str, Any], *, backup: bool = False) -> Optional[Path]:
    """
    Overwrite path with payload as indented JSON.

    With backup=True an existing file is first copied to <stem>.prev<suffix>.
    The new content goes through a temp file and os.replace so a failed write
    never leaves a truncated document. Returns the backup path if one was made.
    """
    target = Path(path)
    prev: Optional[Path] = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        if backup and target.exists():
            prev = backup_path_for(target)
            shutil.copyfile(target, prev)
            logger.info("previous data backed up to %s", prev)

        data = orjson.dumps(payload, option=orjson.OPT_INDENT_2 | orjson.OPT_APPEND_NEWLINE)
        fd, tmp = tempfile.mkstemp(prefix=f".{target.name}.", dir=str(target.parent))
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.chmod(tmp, 0o644)
            os.replace(tmp, target)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
    except (OSError, TypeError) as e:
        raise WriteError(f"cannot write {target}: {e}") from e
    return prev
