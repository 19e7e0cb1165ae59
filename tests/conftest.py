import pytest
from typing import Any, Dict, List, Optional

from ragie_import.models import Document, ImportConfig, ListResponse
from ragie_import.load.ragie import RagieAPIError


class FakeRagieClient:
    """In-memory stand-in for RagieClient that records every call."""

    def __init__(self):
        self.documents: List[Document] = []
        self.calls: List[tuple] = []
        self.fail_list = False
        self.fail_create = False
        self.fail_delete: set = set()
        self._counter = 0

    def add(self, external_id: str, name: str = "existing") -> Document:
        self._counter += 1
        doc = Document(id=f"doc-{self._counter}", name=name, metadata={"external_id": external_id})
        self.documents.append(doc)
        return doc

    def count(self, external_id: str) -> int:
        return sum(1 for d in self.documents if d.metadata.get("external_id") == external_id)

    def calls_named(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]

    @property
    def mutations(self) -> List[tuple]:
        return [c for c in self.calls if c[0] != "list"]

    def list_documents(self, filter: Optional[Dict[str, Any]] = None, page_size: int = 0, cursor: str = "", partition: str = "") -> ListResponse:
        self.calls.append(("list", filter, page_size, partition))
        if self.fail_list:
            raise RagieAPIError("500 Internal Server Error", "list failed")
        docs = [
            d for d in self.documents
            if all(d.metadata.get(k) == v for k, v in (filter or {}).items())
        ]
        if page_size:
            docs = docs[:page_size]
        return ListResponse(documents=docs)

    def create_document_raw(self, partition: str, name: str, data: str, metadata: Dict[str, Any]) -> Document:
        self.calls.append(("create_raw", partition, name, data, dict(metadata)))
        return self._store(name, metadata)

    def create_document(self, partition, name, file_data, file_name, metadata, mode=None) -> Document:
        self.calls.append(("create", partition, name, file_data, file_name, dict(metadata), mode))
        return self._store(name, metadata)

    def delete_document(self, document_id: str) -> None:
        self.calls.append(("delete", document_id))
        if document_id in self.fail_delete:
            raise RagieAPIError("500 Internal Server Error", "delete failed")
        self.documents = [d for d in self.documents if d.id != document_id]

    def _store(self, name: str, metadata: Dict[str, Any]) -> Document:
        if self.fail_create:
            raise RagieAPIError("400 Bad Request", "create failed")
        self._counter += 1
        doc = Document(id=f"doc-{self._counter}", name=name, metadata=dict(metadata))
        self.documents.append(doc)
        return doc


@pytest.fixture
def fake_client() -> FakeRagieClient:
    return FakeRagieClient()


@pytest.fixture
def make_config():
    def _make(**overrides) -> ImportConfig:
        overrides.setdefault("delay", 0)
        return ImportConfig(**overrides)
    return _make
