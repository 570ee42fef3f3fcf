"""Parser for YAML documents: flows, answer sets and formflow.yaml"""

from pathlib import Path
from typing import Any, Dict, Union

import yaml

from ..exceptions import FlowDocumentError


class YAMLParser:
    """Parser for YAML files using PyYAML with safe_load.

    Syntax errors are reported as FlowDocumentError with the offending line.
    """

    def loads(self, text: str, source: str = "<string>") -> Any:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            mark = getattr(e, "problem_mark", None)
            raise FlowDocumentError(
                f"Invalid YAML in {source}",
                line_number=mark.line + 1 if mark is not None else None,
                help_text="Check indentation and quoting near the reported line"
            ) from e

    def load(self, file_path: Union[str, Path]) -> Any:
        with open(file_path) as f:
            return self.loads(f.read(), str(file_path))

    def load_mapping(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        """Load a YAML file whose top level must be a mapping.
        
        Returns:
            Parsed mapping, or empty dict if the file is empty
        """
        data = self.load(file_path)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise FlowDocumentError(
                f"{file_path} must contain a mapping at the top level",
                help_text="Use key: value pairs, e.g. 'autosave:' or 'questions:'"
            )
        return data
