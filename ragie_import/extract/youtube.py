import json
from typing import Any, Dict, Iterator, List
from ..models import CandidateItem, SourceError
from ..log import get_logger

logger = get_logger(__name__)

def build_transcript(title: str, captions: List[Any]) -> str:
    parts = []
    if title:
        parts.append(f"{title}\n\n")
    for caption in captions:
        if isinstance(caption, str) and caption:
            parts.append(f"{caption}\n")
    return "".join(parts)

def video_to_item(video: Dict[str, Any]) -> CandidateItem:
    video_id = video.get("videoId")
    if not isinstance(video_id, str):
        video_id = ""

    title = video.get("title")
    if not isinstance(title, str):
        title = ""

    captions = video.get("captions")
    if not isinstance(captions, list):
        captions = []

    return CandidateItem(
        external_id=video_id,
        title=title or video_id,
        text=build_transcript(title, captions),
        metadata={
            "sourceType": "youtube",
            "title": title,
            "videoId": video_id,
        },
    )

def read_youtube(path: str) -> Iterator[CandidateItem]:
    """Reads a JSON array of videos with `videoId`, `title` and `captions`."""
    logger.info("Loading YouTube JSON file: %s", path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            videos = json.load(f)
    except OSError as e:
        raise SourceError(f"failed to read file: {e}") from e
    except ValueError as e:
        raise SourceError(f"failed to parse JSON: {e}") from e

    if not isinstance(videos, list):
        raise SourceError(f"expected a JSON array of videos in {path}")

    return _iter_videos(videos)

def _iter_videos(videos: List[Any]) -> Iterator[CandidateItem]:
    for index, video in enumerate(videos):
        if not isinstance(video, dict):
            logger.warning("skipping entry %d: not a JSON object", index)
            continue
        yield video_to_item(video)
