# context.py
from __future__ import annotations

import copy
import os
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .model import Document


ENV_KEY = "ENV"


class VariableContext:
    """
    Read-only variables visible to every template in a run.

    Globals come from the document; the process environment is a snapshot taken
    once (or injected by the caller) and exposed under the reserved name `ENV`.
    Nothing here is mutated after construction, so concurrent readers need no lock.
    """

    def __init__(
        self,
        globals: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        if environ is None:
            environ = os.environ
        self._environ: Mapping[str, str] = MappingProxyType(
            {str(k): str(v) for k, v in environ.items()}
        )
        variables: Dict[str, Any] = copy.deepcopy(dict(globals or {}))
        variables[ENV_KEY] = dict(self._environ)
        self._variables = MappingProxyType(variables)

    @classmethod
    def from_document(
        cls,
        document: Document,
        environ: Optional[Mapping[str, str]] = None,
    ) -> VariableContext:
        return cls(document.globals, environ)

    @property
    def environ(self) -> Mapping[str, str]:
        """The environment snapshot every spawned action inherits."""
        return self._environ

    def as_mapping(self) -> Dict[str, Any]:
        # shallow copy: jinja2 wants a real dict, the nested values are never written to
        return dict(self._variables)

    def __contains__(self, name: str) -> bool:
        return name in self._variables

    def __getitem__(self, name: str) -> Any:
        return self._variables[name]
