"""Load flow documents and answer sets from JSON or YAML files"""

import json
from pathlib import Path
from typing import Any, Dict, Union

from pydantic import ValidationError

from ..exceptions import FlowDocumentError
from ..models.flow import Flow
from .yaml_parser import YAMLParser


def _read_document(path: Path) -> Any:
    if not path.exists():
        raise FlowDocumentError(f"File not found: {path}")

    text = path.read_text()
    if path.suffix.lower() == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise FlowDocumentError(
                f"Invalid JSON in {path}: {e.msg}",
                line_number=e.lineno,
                help_text="Check for trailing commas and unquoted keys"
            ) from e

    return YAMLParser().loads(text, str(path))


def parse_flow(data: Union[Dict[str, Any], list]) -> Flow:
    """Build a Flow from a parsed document
    
    A bare list is read as the question list of an untitled flow.
    
    Raises:
        FlowDocumentError: If the document does not describe a flow
    """
    if isinstance(data, list):
        data = {"questions": data}
    if not isinstance(data, dict):
        raise FlowDocumentError(
            "Flow document must be a mapping",
            help_text="Expected keys: questions, endings, workflow_nodes, workflow_edges"
        )
    try:
        return Flow.from_document(data)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise FlowDocumentError(
            f"Invalid flow document at {location}: {first['msg']}",
            help_text=f"{e.error_count()} problem(s) found; fix them and reload"
        ) from e


def load_flow(path: Path) -> Flow:
    """Load a flow from a .json, .yaml or .yml file"""
    return parse_flow(_read_document(Path(path)))


def load_answers(path: Path) -> Dict[str, Any]:
    """Load an answer set keyed by question id"""
    data = _read_document(Path(path)) or {}
    if not isinstance(data, dict):
        raise FlowDocumentError(
            f"Answers in {path} must be a mapping of question id to answer",
            help_text="Example: {\"q1\": \"Enterprise\", \"q2\": [\"A\", \"B\"]}"
        )
    return {str(key): value for key, value in data.items()}
