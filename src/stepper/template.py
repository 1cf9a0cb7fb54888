# template.py
"""
Template rendering for step fields.

Every string in a step is a Jinja2 template rendered against the run's
VariableContext right before the step executes:

    command: "deploy --env {{ stage }} --tag {{ build.tag }}"
    dest: "{{ ENV.HOME }}/.config/app.ini"

Undefined names are errors (StrictUndefined); a failed render never yields
partially substituted text.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Union

from jinja2 import Environment, StrictUndefined, TemplateError, TemplateSyntaxError, UndefinedError

from .context import VariableContext
from .errors import RenderError


FALSE_WORDS = frozenset({"", "false", "no", "off", "0"})


class Renderer:
    """Renders template strings against a VariableContext. Stateless between calls."""

    def __init__(self, environment: Optional[Environment] = None):
        self.environment = environment or Environment(
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )

    def render(self, template: str, context: VariableContext, *, field: Optional[str] = None) -> str:
        """
        Render one template string.

        Raises:
            RenderError: undefined variable, malformed placeholder syntax, or an
                expression that fails while evaluating
        """
        try:
            compiled = self.environment.from_string(template)
        except TemplateSyntaxError as e:
            raise RenderError(
                message=f"malformed template: {e.message}",
                field=field,
                details={"template": template, "line": e.lineno},
            ) from e

        try:
            return compiled.render(context.as_mapping())
        except UndefinedError as e:
            raise RenderError(
                message=f"undefined variable: {e.message}",
                field=field,
                details={"template": template},
            ) from e
        except TemplateError as e:
            raise RenderError(message=str(e), field=field, details={"template": template}) from e
        except Exception as e:
            # parses fine but fails while evaluating: {{ 1 / 0 }}, {{ name + 1 }}
            raise RenderError(
                message=f"template evaluation failed: {e}",
                field=field,
                details={"template": template},
            ) from e

    def render_map(
        self,
        mapping: Mapping[str, str],
        context: VariableContext,
        *,
        field: str = "env",
    ) -> Dict[str, str]:
        """Render every value, keeping keys (and their order) as-is."""
        out: Dict[str, str] = {}
        for key, value in mapping.items():
            out[key] = self.render(value, context, field=f"{field}.{key}")
        return out

    def render_condition(
        self,
        value: Union[bool, str, None],
        context: VariableContext,
        *,
        field: str = "when",
    ) -> bool:
        """
        Evaluate a skip-condition. None means "always run".

        Strings are rendered; "", "false", "no", "off" and "0" (any case) are false.
        """
        if value is None:
            return True
        if isinstance(value, bool):
            return value
        rendered = self.render(value, context, field=field)
        return rendered.strip().lower() not in FALSE_WORDS


_default_renderer: Optional[Renderer] = None


def get_renderer() -> Renderer:
    global _default_renderer
    if _default_renderer is None:
        _default_renderer = Renderer()
    return _default_renderer


def render(template: str, context: VariableContext) -> str:
    return get_renderer().render(template, context)


def render_map(mapping: Mapping[str, Any], context: VariableContext) -> Dict[str, str]:
    return get_renderer().render_map(mapping, context)
