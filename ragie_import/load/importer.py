import time
import requests
from typing import Callable, Iterable, List, NamedTuple, Optional
from ..models import CandidateItem, Document, ImportConfig, ImportStats
from ..transform.mode import construct_mode
from ..log import get_logger
from .ragie import RagieAPIError, RagieClient

logger = get_logger(__name__)

# Failures the run recovers from; anything else is a bug and propagates
RECOVERABLE_ERRORS = (RagieAPIError, requests.RequestException)

class DocumentLookup(NamedTuple):
    documents: List[Document]
    error: Optional[Exception] = None

class Importer:
    """Reconciles candidate items against remote documents and uploads them.

    Items are handled strictly one after another: existence check, conflict
    resolution (skip, force a duplicate, or replace), upload, then a fixed
    delay before the next item.
    """

    def __init__(self, client: RagieClient, config: ImportConfig, sleep: Callable[[float], None] = time.sleep):
        self.client = client
        self.config = config
        self.mode = construct_mode(config)
        self.sleep = sleep
        self.stats = ImportStats()

    def run(self, items: Iterable[CandidateItem]) -> ImportStats:
        for item in items:
            self.stats.found += 1
            status = self.process_item(item)
            if status == "created":
                self.stats.created += 1
            elif status == "would_create":
                self.stats.dry_run += 1
            elif status == "error":
                self.stats.errors += 1
            else:
                self.stats.skipped += 1
        return self.stats

    def process_item(self, item: CandidateItem) -> str:
        """Returns one of: created, would_create, exists, empty, invalid, error."""
        if not item.external_id:
            logger.warning("skipping item with no external id: %s", item.title or "<untitled>")
            return "invalid"

        try:
            return self._reconcile(item)
        finally:
            if self.config.delay > 0:
                self.sleep(self.config.delay)

    def _reconcile(self, item: CandidateItem) -> str:
        page_size = 100 if self.config.replace else 1
        lookup = self.lookup(item.external_id, page_size)
        if lookup.error is not None:
            # Fail open: an unanswered existence check counts as "no document"
            logger.warning("existence check failed for %s, treating as new: %s", item.external_id, lookup.error)
            existing = []
        else:
            existing = lookup.documents

        if existing:
            if self.config.replace:
                if not self._delete_existing(item, existing):
                    return "error"
            elif self.config.force:
                logger.info("document exists for %s, creating duplicate (--force)", item.external_id)
            else:
                logger.warning("skipping item with existing document: %s", item.external_id)
                return "exists"

        if not item.is_binary and not item.text.strip():
            logger.warning("refusing to upload empty content: %s", item.external_id)
            return "empty"

        return self._upload(item)

    def lookup(self, external_id: str, page_size: int = 1) -> DocumentLookup:
        try:
            response = self.client.list_documents(
                filter={"external_id": external_id},
                page_size=page_size,
                partition=self.config.partition,
            )
        except RECOVERABLE_ERRORS as e:
            return DocumentLookup([], e)
        return DocumentLookup(response.documents)

    def _delete_existing(self, item: CandidateItem, documents: List[Document]) -> bool:
        for doc in documents:
            if self.config.dry_run:
                logger.info("would delete %s (%s)", doc.id, item.external_id)
                continue
            try:
                self.client.delete_document(doc.id)
            except RECOVERABLE_ERRORS as e:
                logger.error("failed to delete %s for %s, not re-creating: %s", doc.id, item.external_id, e)
                return False
            self.stats.deleted += 1
            logger.info("deleted %s (%s)", doc.id, item.external_id)
        return True

    def _upload(self, item: CandidateItem) -> str:
        metadata = dict(item.metadata)
        metadata["external_id"] = item.external_id
        name = item.title or item.file_name or item.external_id

        if self.config.dry_run:
            print(f"would save document: {name}")
            return "would_create"

        try:
            if item.is_binary:
                doc = self.client.create_document(
                    self.config.partition,
                    name,
                    item.data,
                    item.file_name or name,
                    metadata,
                    self.mode,
                )
            else:
                doc = self.client.create_document_raw(self.config.partition, name, item.text, metadata)
        except RECOVERABLE_ERRORS as e:
            logger.error("failed to import %s: %s", item.external_id, e)
            return "error"

        print(f"saved: {doc.id}")
        return "created"

def clear_documents(client: RagieClient, partition: str = "", dry_run: bool = False) -> int:
    """Deletes every document in the partition. Returns the number deleted.

    A failed listing propagates; a failed delete is logged and skipped.
    """
    deleted = 0
    for doc in client.iter_documents(partition=partition):
        if dry_run:
            logger.info("would delete %s", doc.id)
            continue
        try:
            client.delete_document(doc.id)
        except RECOVERABLE_ERRORS as e:
            logger.error("error deleting document %s: %s", doc.id, e)
            continue
        deleted += 1
        logger.info("deleted %s", doc.id)
    return deleted
