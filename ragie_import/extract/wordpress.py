import feedparser
import xml.etree.ElementTree as ET
from typing import Iterator, List
from ..models import CandidateItem, SourceError
from ..log import get_logger

logger = get_logger(__name__)

def post_to_item(url: str, title: str, description: str, content: str) -> CandidateItem:
    return CandidateItem(
        external_id=url,
        title=title or url,
        text="\n\n".join([title, description, content]),
        metadata={
            "sourceType": "wordpress",
            "url": url,
            "title": title,
        },
    )

def read_wordpress(path: str) -> Iterator[CandidateItem]:
    """Reads a WordPress export.

    Plain exports list `<post>` elements with url, title, description and
    content children. WXR exports (an RSS document) are read with feedparser.
    """
    logger.info("Loading WordPress XML file: %s", path)
    try:
        root = ET.parse(path).getroot()
    except OSError as e:
        raise SourceError(f"failed to read XML file: {e}") from e
    except ET.ParseError as e:
        raise SourceError(f"failed to parse XML file: {e}") from e

    if root.tag == "rss":
        return _iter_feed_entries(path)
    return _iter_posts(root.findall(".//post"))

def _iter_posts(posts: List[ET.Element]) -> Iterator[CandidateItem]:
    for post in posts:
        yield post_to_item(
            url=(post.findtext("url") or "").strip(),
            title=post.findtext("title") or "",
            description=post.findtext("description") or "",
            content=post.findtext("content") or "",
        )

def _iter_feed_entries(path: str) -> Iterator[CandidateItem]:
    feed = feedparser.parse(path)
    for entry in feed.entries:
        # WXR also exports media library attachments as items
        if entry.get("wp_post_type") == "attachment":
            continue

        content = ""
        if "content" in entry:
            content = entry.content[0].value

        description = entry.get("summary", "")
        if description == content:
            description = ""

        yield post_to_item(
            url=entry.get("link", "").strip(),
            title=entry.get("title", ""),
            description=description,
            content=content,
        )
