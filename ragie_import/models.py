from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Any, Dict, List, Optional, Literal, Union

Scalar = Union[str, int, float, bool]

class SourceError(Exception):
    """Raised when a whole source cannot be read or parsed."""

class CandidateItem(BaseModel):
    external_id: str = Field("", description="Idempotency key: videoId, post URL, slug or relative path")
    title: str = ""
    text: Optional[str] = None
    data: Optional[bytes] = None
    file_name: Optional[str] = None
    metadata: Dict[str, Scalar] = {}

    @model_validator(mode="after")
    def _one_body(self):
        if (self.text is None) == (self.data is None):
            raise ValueError("exactly one of text or data must be set")
        return self

    @property
    def is_binary(self) -> bool:
        return self.data is not None

class StructuredMode(BaseModel):
    static: str = ""
    audio: bool = False
    video: str = ""

    def is_empty(self) -> bool:
        return not (self.static or self.audio or self.video)

    def to_json(self) -> str:
        # Empty fields are omitted from the wire payload
        return self.model_dump_json(exclude_defaults=True)

# A bare string is sent verbatim, a StructuredMode as a JSON object
ModeOption = Union[str, StructuredMode]

class ImportConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    dry_run: bool = False
    delay: float = Field(2.0, ge=0)
    partition: str = ""
    mode: Literal["", "fast", "hi_res", "all"] = ""
    static_mode: str = ""
    audio: bool = False
    video: Literal["", "audio_only", "video_only", "audio_video"] = ""
    force: bool = False
    replace: bool = False

    @model_validator(mode="after")
    def _force_or_replace(self):
        if self.force and self.replace:
            raise ValueError("--force and --replace flags cannot be used together")
        return self

class Document(BaseModel):
    id: str
    name: str = ""
    metadata: Dict[str, Any] = {}

class Pagination(BaseModel):
    next_cursor: Optional[str] = None

class ListResponse(BaseModel):
    documents: List[Document] = []
    pagination: Pagination = Pagination()

class ImportStats(BaseModel):
    found: int = 0
    created: int = 0
    skipped: int = 0
    deleted: int = 0
    errors: int = 0
    dry_run: int = 0
