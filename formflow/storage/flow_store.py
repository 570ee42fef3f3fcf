"""FlowStore abstract base class and implementations

A store holds flow documents (the JSON shape produced by Flow.to_document).
On first save a store may assign the id; the document it returns is
authoritative.
"""

import json
import logging
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

import aiofiles
import aiohttp

from ..exceptions import PersistenceError

logger = logging.getLogger(__name__)


def _new_flow_id() -> str:
    return uuid.uuid4().hex


class FlowStore(ABC):
    """Abstract interface for flow document persistence"""
    
    @abstractmethod
    async def save(self, flow_id: Optional[str], document: Dict[str, Any]) -> Dict[str, Any]:
        """Create or update a flow document
        
        Args:
            flow_id: Existing flow id, or None to create
            document: Flow document to persist
            
        Returns:
            Stored document, including its id
            
        Raises:
            PersistenceError: If the store cannot persist the document
        """
        pass
    
    @abstractmethod
    async def load(self, flow_id: str) -> Optional[Dict[str, Any]]:
        """Load a flow document
        
        Returns:
            Flow document if found, None otherwise
        """
        pass
    
    @abstractmethod
    async def delete(self, flow_id: str) -> None:
        pass


class FilesystemFlowStore(FlowStore):
    """FlowStore implementation using one JSON file per flow"""
    
    def __init__(self, base_path: Path = Path(".formflow")):
        """Initialize filesystem store
        
        Args:
            base_path: Directory holding <flow_id>.json files (default: .formflow)
        """
        self.base_path = Path(base_path)
    
    def _path(self, flow_id: str) -> Path:
        return self.base_path / f"{flow_id}.json"
    
    async def save(self, flow_id: Optional[str], document: Dict[str, Any]) -> Dict[str, Any]:
        """Atomic write to <base_path>/<flow_id>.json
        
        Uses temporary file and atomic rename to ensure no partial writes.
        """
        flow_id = flow_id or document.get("id") or _new_flow_id()
        stored = dict(document, id=flow_id)
        
        flow_file = self._path(flow_id)
        temp_file = self.base_path / f"{flow_id}.json.tmp"
        
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(temp_file, 'w') as f:
                await f.write(json.dumps(stored, indent=2))
            temp_file.replace(flow_file)
        except (OSError, TypeError, ValueError) as e:
            if temp_file.exists():
                temp_file.unlink()
            raise PersistenceError("save", flow_id, str(e)) from e
        
        logger.debug("Saved flow %s to %s", flow_id, flow_file)
        return stored
    
    async def load(self, flow_id: str) -> Optional[Dict[str, Any]]:
        flow_file = self._path(flow_id)
        if not flow_file.exists():
            return None
        
        try:
            async with aiofiles.open(flow_file, 'r') as f:
                content = await f.read()
            return json.loads(content)
        except (OSError, ValueError) as e:
            raise PersistenceError("load", flow_id, str(e)) from e
    
    async def delete(self, flow_id: str) -> None:
        flow_file = self._path(flow_id)
        if flow_file.exists():
            try:
                flow_file.unlink()
            except OSError as e:
                raise PersistenceError("delete", flow_id, str(e)) from e


class InMemoryFlowStore(FlowStore):
    """FlowStore implementation for testing without filesystem dependencies"""
    
    def __init__(self):
        self._storage: Dict[str, Dict[str, Any]] = {}
    
    async def save(self, flow_id: Optional[str], document: Dict[str, Any]) -> Dict[str, Any]:
        flow_id = flow_id or document.get("id") or _new_flow_id()
        stored = json.loads(json.dumps(dict(document, id=flow_id)))
        self._storage[flow_id] = stored
        return stored
    
    async def load(self, flow_id: str) -> Optional[Dict[str, Any]]:
        return self._storage.get(flow_id)
    
    async def delete(self, flow_id: str) -> None:
        self._storage.pop(flow_id, None)


class HttpFlowStore(FlowStore):
    """FlowStore backed by the CRM forms API
    
    POST <base_url> creates, PUT/GET/DELETE <base_url>/<id> update, read and
    remove. Responses may wrap the document as {"form": {...}}.
    """
    
    def __init__(self, base_url: str, headers: Optional[Dict[str, str]] = None):
        self.base_url = base_url.rstrip('/')
        self.headers = headers or {}
    
    @staticmethod
    def _unwrap(data: Any) -> Optional[Dict[str, Any]]:
        if isinstance(data, dict) and isinstance(data.get("form"), dict):
            return data["form"]
        return data if isinstance(data, dict) else None
    
    async def _request(self, method: str, url: str, operation: str, flow_id: Optional[str], **kwargs) -> Any:
        try:
            async with aiohttp.ClientSession(headers=self.headers) as session:
                async with session.request(method, url, **kwargs) as response:
                    if response.status == 404 and operation in ("load", "delete"):
                        return None
                    if response.status >= 400:
                        raise PersistenceError(operation, flow_id, f"HTTP {response.status}")
                    logger.debug("%s %s -> %s", method, url, response.status)
                    if response.status == 204:
                        return None
                    return await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise PersistenceError(operation, flow_id, str(e)) from e
    
    async def save(self, flow_id: Optional[str], document: Dict[str, Any]) -> Dict[str, Any]:
        if flow_id:
            data = await self._request("PUT", f"{self.base_url}/{flow_id}", "save", flow_id, json=document)
        else:
            data = await self._request("POST", self.base_url, "create", None, json=document)
        
        stored = self._unwrap(data) or dict(document)
        if not stored.get("id"):
            if not flow_id:
                raise PersistenceError("create", None, "response did not include an id")
            stored = dict(stored, id=flow_id)
        return stored
    
    async def load(self, flow_id: str) -> Optional[Dict[str, Any]]:
        data = await self._request("GET", f"{self.base_url}/{flow_id}", "load", flow_id)
        return self._unwrap(data)
    
    async def delete(self, flow_id: str) -> None:
        await self._request("DELETE", f"{self.base_url}/{flow_id}", "delete", flow_id)
