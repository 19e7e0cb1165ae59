import re
import json
import zipfile
import yaml
from pathlib import PurePosixPath
from typing import Any, Dict, Iterator, Tuple
from ..models import CandidateItem, Scalar
from ..log import get_logger
from .files import open_archive, read_entry

logger = get_logger(__name__)

FRONTMATTER_RE = re.compile(r"\A\s*---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)

def _scalar(value: Any) -> Scalar:
    if isinstance(value, str):
        return value
    return json.dumps(value)

def _parse_lines(block: str) -> Dict[str, Any]:
    fields = {}
    for line in block.splitlines():
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        fields[key.strip()] = value.strip().strip('"')
    return fields

def parse_frontmatter(block: str) -> Dict[str, Scalar]:
    """Parses a frontmatter block, keeping every value as the text written in the file.

    BaseLoader does no type resolution, so `slug: 1.10` stays "1.10" and
    `title: 2024` stays "2024".
    """
    try:
        fields = yaml.load(block, Loader=yaml.BaseLoader)
    except yaml.YAMLError:
        fields = None
    # Hand-edited exports are not always valid YAML
    if not isinstance(fields, dict):
        fields = _parse_lines(block)
    return {str(k): _scalar(v) for k, v in fields.items()}

def split_frontmatter(text: str) -> Tuple[Dict[str, Scalar], str]:
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    return parse_frontmatter(match.group(1)), text[match.end():]

def page_to_item(file_name: str, text: str) -> CandidateItem:
    fields, body = split_frontmatter(text)

    metadata: Dict[str, Scalar] = {"sourceType": "readmeio"}
    metadata.update(fields)

    slug = metadata.get("slug", "")
    if slug:
        metadata["readmeId"] = slug

    title = metadata.get("title")
    if not isinstance(title, str) or not title:
        title = PurePosixPath(file_name).name[: -len(".md")]

    return CandidateItem(external_id=slug, title=title, text=body, metadata=metadata)

def read_readmeio(path: str) -> Iterator[CandidateItem]:
    """Reads the markdown pages of a readme.io documentation export (ZIP)."""
    logger.info("Loading readme.io ZIP file: %s", path)
    archive = open_archive(path)
    return _iter_pages(archive)

def _iter_pages(archive: zipfile.ZipFile) -> Iterator[CandidateItem]:
    with archive:
        for info in archive.infolist():
            if info.is_dir() or not info.filename.endswith(".md"):
                continue

            raw = read_entry(archive, info)
            if raw is None:
                continue

            text = raw.decode("utf-8", errors="replace")
            if not text.strip():
                logger.warning("refusing to upload empty content: %s", info.filename)
                continue

            yield page_to_item(info.filename, text)
