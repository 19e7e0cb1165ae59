import os
import zlib
import zipfile
from pathlib import PurePosixPath
from typing import Iterator, Optional
from ..models import CandidateItem, SourceError
from ..log import get_logger

logger = get_logger(__name__)

ENTRY_READ_ERRORS = (zipfile.BadZipFile, OSError, RuntimeError, NotImplementedError, zlib.error)

def is_hidden(rel_path: str) -> bool:
    return any(part.startswith(".") for part in PurePosixPath(rel_path).parts)

def file_metadata(source_type: str, rel_path: str, size: int) -> dict:
    return {
        "source_type": source_type,
        "path": rel_path,
        "extension": PurePosixPath(rel_path).suffix.lower(),
        "size": size,
    }

def open_archive(path: str) -> zipfile.ZipFile:
    try:
        return zipfile.ZipFile(path)
    except (OSError, zipfile.BadZipFile) as e:
        raise SourceError(f"failed to open ZIP file: {e}") from e

def read_entry(archive: zipfile.ZipFile, info: zipfile.ZipInfo) -> Optional[bytes]:
    """Reads one archive member, returning None (and logging) on failure."""
    try:
        with archive.open(info) as f:
            return f.read()
    except ENTRY_READ_ERRORS as e:
        logger.error("failed to read file in zip %s: %s", info.filename, e)
        return None

def read_files(path: str) -> Iterator[CandidateItem]:
    """Walks a directory tree (or a single file) yielding one binary item per file.

    External IDs are paths relative to the root, always `/`-separated.
    """
    logger.info("Loading files from: %s", path)
    if os.path.isfile(path):
        root = os.path.dirname(os.path.abspath(path))
        return _iter_paths(root, [os.path.abspath(path)])
    if not os.path.isdir(path):
        raise SourceError(f"no such file or directory: {path}")
    return _iter_paths(path, _walk(path))

def _walk(root: str) -> Iterator[str]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        for name in sorted(filenames):
            if not name.startswith("."):
                yield os.path.join(dirpath, name)

def _iter_paths(root: str, paths) -> Iterator[CandidateItem]:
    for full_path in paths:
        rel_path = os.path.relpath(full_path, root).replace(os.sep, "/")
        try:
            with open(full_path, "rb") as f:
                data = f.read()
        except OSError as e:
            logger.error("failed to read file %s: %s", rel_path, e)
            continue

        if not data:
            logger.warning("refusing to upload empty file: %s", rel_path)
            continue

        name = os.path.basename(full_path)
        yield CandidateItem(
            external_id=rel_path,
            title=name,
            data=data,
            file_name=name,
            metadata=file_metadata("files", rel_path, len(data)),
        )

def read_zip(path: str) -> Iterator[CandidateItem]:
    """Yields one binary item per file stored in a ZIP archive, in archive order."""
    logger.info("Loading ZIP file: %s", path)
    archive = open_archive(path)
    return _iter_zip(archive, os.path.basename(path))

def _iter_zip(archive: zipfile.ZipFile, zip_source: str) -> Iterator[CandidateItem]:
    with archive:
        for info in archive.infolist():
            if info.is_dir() or info.filename.startswith("__MACOSX/") or is_hidden(info.filename):
                continue
            if info.file_size == 0:
                logger.warning("refusing to upload empty file: %s", info.filename)
                continue

            data = read_entry(archive, info)
            if data is None:
                continue

            name = PurePosixPath(info.filename).name
            metadata = file_metadata("zip", info.filename, len(data))
            metadata["zip_source"] = zip_source
            yield CandidateItem(
                external_id=info.filename,
                title=name,
                data=data,
                file_name=name,
                metadata=metadata,
            )
