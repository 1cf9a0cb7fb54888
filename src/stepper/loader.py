# loader.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import ValidationError

from .errors import DocumentError
from .model import Document


def _format_validation(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc or '<root>'}: {err.get('msg')}")
    return "; ".join(parts)


def parse_document(text: str, *, source: str = "<string>") -> Document:
    """
    Parse YAML text into a validated Document.

    Raises:
      DocumentError: YAML syntax error, non-mapping root, schema violation
    """
    try:
        data: Any = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DocumentError(message=f"invalid YAML: {e}", details={"source": source}) from e

    if not isinstance(data, dict):
        raise DocumentError(
            message=f"document root must be a mapping, got {type(data).__name__}",
            details={"source": source},
        )

    try:
        return Document.model_validate(data)
    except ValidationError as e:
        raise DocumentError(
            message=f"invalid document: {_format_validation(e)}",
            details={"source": source},
        ) from e


def load_document(path: Union[str, Path]) -> Document:
    """Read and validate a step document from disk."""
    doc_path = Path(path).expanduser()
    if not doc_path.is_file():
        raise DocumentError(message=f"document not found: {doc_path}", details={"source": str(doc_path)})
    try:
        text = doc_path.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentError(message=f"could not read document: {e}", details={"source": str(doc_path)}) from e
    return parse_document(text, source=str(doc_path))
