# environment.py
from __future__ import annotations

from typing import Dict, Mapping, Optional

from .context import VariableContext
from .template import Renderer, get_renderer


def compose(
    step_env: Optional[Mapping[str, str]],
    operation_env: Optional[Mapping[str, str]],
    context: VariableContext,
    *,
    renderer: Optional[Renderer] = None,
    operation_field: str = "operation.env",
) -> Dict[str, str]:
    """
    Build the environment for one spawned action.

    Precedence (lowest -> highest):
      inherited snapshot -> rendered step env -> rendered operation env

    Raises:
      RenderError: field is "env.<KEY>" for step overrides and
                   "<operation_field>.<KEY>" for operation overrides
    """
    renderer = renderer or get_renderer()

    env = dict(context.environ)
    env.update(renderer.render_map(step_env or {}, context, field="env"))
    env.update(renderer.render_map(operation_env or {}, context, field=operation_field))
    return env
