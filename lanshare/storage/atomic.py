import os
import shutil
from contextlib import suppress
from pathlib import Path


def _carry_over_metadata(src: Path, dst: Path) -> None:
    # the replacement must stay open to every client that could use the old file
    shutil.copymode(src, dst)
    if hasattr(os, "chown"):
        st = src.stat()
        with suppress(PermissionError):
            os.chown(dst, st.st_uid, st.st_gid)


def atomic_write_text(path: Path, text: str) -> None:
    """
    Replace `path` with `text` in one step: write a sibling temp file,
    fsync it, then rename it over the target. Readers see either the old
    content or the new content, never a partial write.

    An existing target keeps its permission bits (and owner, where the
    process is allowed to set it).
    """
    tmp = path.with_name(path.name + ".tmp")
    try:
        with tmp.open("w", encoding="utf-8") as fh:
            fh.write(text)
            fh.flush()
            os.fsync(fh.fileno())  # ensure it's on disk
        if path.exists():
            _carry_over_metadata(path, tmp)
        tmp.replace(path)
    except BaseException:
        with suppress(OSError):
            tmp.unlink()
        raise
