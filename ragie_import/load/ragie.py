import json
import requests
from typing import Any, Dict, Iterator, Optional
from pydantic import BaseModel
from ..models import Document, ListResponse, ModeOption, StructuredMode
from ..log import get_logger

logger = get_logger(__name__)

BASE_URL = "https://api.ragie.ai"

class RagieAPIError(Exception):
    def __init__(self, status: str, body: str):
        super().__init__(f"API error: {status} - {body}")
        self.status = status
        self.body = body

class RagieClient:
    def __init__(self, api_key: str, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or BASE_URL).rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }

    def _request(self, method: str, path: str, expected: int, **kwargs) -> requests.Response:
        headers = dict(self.headers)
        headers.update(kwargs.pop("headers", {}))
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        response = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        if response.status_code != expected:
            raise RagieAPIError(f"{response.status_code} {response.reason}", response.text)
        return response

    def _parse(self, response: requests.Response, model: type) -> BaseModel:
        try:
            return model.model_validate(response.json())
        except ValueError as e:
            raise RagieAPIError(f"{response.status_code} {response.reason}", f"invalid response: {e}") from e

    def list_documents(
        self,
        filter: Optional[Dict[str, Any]] = None,
        page_size: int = 0,
        cursor: str = "",
        partition: str = "",
    ) -> ListResponse:
        params = {}
        if filter is not None:
            params["filter"] = json.dumps(filter)
        if page_size > 0:
            params["page_size"] = page_size
        if cursor:
            params["cursor"] = cursor

        headers = {"Partition": partition} if partition else {}
        response = self._request("GET", "/documents", 200, params=params, headers=headers)
        return self._parse(response, ListResponse)

    def iter_documents(self, partition: str = "", page_size: int = 100) -> Iterator[Document]:
        """Yields every document in the partition, following pagination cursors."""
        cursor = ""
        while True:
            page = self.list_documents(filter={}, page_size=page_size, cursor=cursor, partition=partition)
            if not page.documents:
                return
            yield from page.documents
            cursor = page.pagination.next_cursor or ""
            if not cursor:
                return

    def create_document_raw(self, partition: str, name: str, data: str, metadata: Dict[str, Any]) -> Document:
        payload = {
            "name": name,
            "data": data,
            "metadata": metadata,
        }
        if partition:
            payload["partition"] = partition

        response = self._request("POST", "/documents/raw", 201, json=payload)
        return self._parse(response, Document)

    def create_document(
        self,
        partition: str,
        name: str,
        file_data: bytes,
        file_name: str,
        metadata: Optional[Dict[str, Any]],
        mode: Optional[ModeOption] = None,
    ) -> Document:
        """Uploads a file as multipart form data.

        `mode` is sent verbatim when it is a string ("fast", "hi_res") and as a
        JSON object when it is a StructuredMode.
        """
        form = {"name": name}
        if partition:
            form["partition"] = partition
        if mode is not None:
            if isinstance(mode, StructuredMode):
                form["mode"] = mode.to_json()
            elif isinstance(mode, str):
                form["mode"] = mode
            else:
                raise TypeError(f"invalid mode type: {type(mode).__name__}")
        if metadata is not None:
            form["metadata"] = json.dumps(metadata)

        files = {"file": (file_name, file_data)}
        response = self._request("POST", "/documents", 201, data=form, files=files)
        return self._parse(response, Document)

    def delete_document(self, document_id: str) -> None:
        self._request("DELETE", f"/documents/{document_id}", 200)
