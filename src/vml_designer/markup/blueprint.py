"""Blueprint Parser - JSON form documents (.bp / .json)."""

from typing import Any, Dict, List

from pydantic.alias_generators import to_pascal

from vml_designer.core import ValidationError, get_logger
from vml_designer.core.json import JSONParseError, extract_json
from vml_designer.controls.convert import format_value
from .types import ParsedDocument, ParsedNode, ParsedScript

logger = get_logger(__name__)

LAYOUT_SHORTCUTS = {"row": "Horizontal", "col": "Vertical"}


class BlueprintParser:
    """
    Parses Blueprint files into a ParsedDocument.

    {
      "form": {"name": "Main", "title": "Hello", "width": 400},
      "scripts": {"SaveHandler": {"interpreter": "python", "content": "..."}},
      "ui": [{"Button#Save": {"Content": "Save", "@click": "SaveHandler()"}}]
    }
    """

    extensions = (".bp", ".json")

    def __init__(self):
        self._id_counter = 0

    def parse(self, text: str, source: str = "<string>") -> ParsedDocument:
        self._id_counter = 0

        try:
            bp = extract_json(text, repair=True)
        except JSONParseError as e:
            logger.error("json_parse_failed", source=source, error=str(e))
            raise ValidationError(f"Invalid JSON: {e}") from e

        ui = bp.get("ui", [])
        if isinstance(ui, dict):
            ui = ui.get("components", [])
        if not isinstance(ui, list):
            logger.error("invalid_format", source=source, section="ui")
            raise ValidationError("Invalid Blueprint: 'ui' must be a list of components")

        components = self._expand_components(ui)
        form = bp.get("form")
        roots = [self._wrap_form(form, components)] if form else components

        return ParsedDocument(roots=roots, scripts=self._expand_scripts(bp.get("scripts", {})))

    def _next_name(self, comp_type: str) -> str:
        self._id_counter += 1
        return f"{comp_type}_{self._id_counter}"

    def _wrap_form(self, form: Dict[str, Any], components: List[ParsedNode]) -> ParsedNode:
        """Window root; several components share a vertical StackPanel."""
        if not isinstance(form, dict):
            raise ValidationError("Invalid Blueprint: 'form' must be an object")
        name = form.get("name") or "Form"
        props = {to_pascal(k): format_value(v) for k, v in form.items() if k != "name"}
        window = ParsedNode(type="Window", name=name, properties=props)
        if len(components) == 1:
            window.children = components
        elif components:
            window.children = [
                ParsedNode(
                    type="StackPanel",
                    name=f"{name}_Layout",
                    properties={"Orientation": "Vertical"},
                    children=components,
                )
            ]
        return window

    def _expand_scripts(self, scripts: Any) -> List[ParsedScript]:
        """
        Expand script definitions

        Supports:
        - Mapping: {Name: {interpreter, instance, content}}
        - Mapping shorthand: {Name: "source"} -> python
        - List: [{name, interpreter, instance, content}]
        """
        result = []
        if isinstance(scripts, dict):
            for name, spec in scripts.items():
                if isinstance(spec, str):
                    result.append(ParsedScript(name=name, content=spec))
                elif isinstance(spec, dict):
                    result.append(ParsedScript(name=name, **self._script_fields(spec)))
        elif isinstance(scripts, list):
            for spec in scripts:
                if isinstance(spec, dict) and spec.get("name"):
                    result.append(ParsedScript(name=spec["name"], **self._script_fields(spec)))
        return result

    @staticmethod
    def _script_fields(spec: Dict[str, Any]) -> Dict[str, Any]:
        content = spec.get("content", "")
        if isinstance(content, list):
            content = "\n".join(content)
        return {
            "interpreter": spec.get("interpreter", "python"),
            "instance": spec.get("instance"),
            "content": content,
        }

    def _expand_components(self, components: List[Any]) -> List[ParsedNode]:
        """Recursively expand component list"""
        result = []
        for comp in components:
            expanded = self._expand_component(comp)
            if expanded:
                result.append(expanded)
        return result

    def _expand_component(self, comp: Any) -> ParsedNode | None:
        """
        Expand a single component

        Formats:
        - Explicit: {type: "Button", name: "Save", props: {...}, on_event: {...}, children: [...]}
        - Compact: {"Button#Save": {"Content": "Save", "@click": "...", "children": [...]}}
        - Simple strings: "Hello" -> TextBlock with Text="Hello"
        """
        if isinstance(comp, str):
            return ParsedNode(type="TextBlock", name=self._next_name("TextBlock"), properties={"Text": comp})

        if not isinstance(comp, dict):
            logger.warning("component_skipped", kind=type(comp).__name__)
            return None

        if "type" in comp:
            return self._expand_explicit_component(comp)

        for key, props in comp.items():
            if not isinstance(props, dict):
                props = {}

            comp_type, _, comp_name = key.partition("#")
            explicit_props = {}
            events = {}
            children_data = None

            for k, v in props.items():
                if k.startswith("@"):
                    events[k[1:]] = v
                elif k == "children":
                    children_data = v
                else:
                    explicit_props[k] = v

            explicit_comp = {"type": comp_type, "name": comp_name or None, "props": explicit_props}
            if events:
                explicit_comp["on_event"] = events
            if children_data:
                explicit_comp["children"] = children_data
            return self._expand_explicit_component(explicit_comp)

        return None

    def _expand_explicit_component(self, comp: Dict[str, Any]) -> ParsedNode:
        comp_type = comp.get("type") or "StackPanel"
        props = {to_pascal(k) if k[:1].islower() else k: format_value(v)
                 for k, v in (comp.get("props") or {}).items()}

        # Layout shortcuts
        orientation = LAYOUT_SHORTCUTS.get(comp_type.lower())
        if orientation:
            comp_type = "StackPanel"
            props.setdefault("Orientation", orientation)

        for event, handler in (comp.get("on_event") or {}).items():
            props[f"On{to_pascal(event)}"] = str(handler)

        name = comp.get("name") or comp.get("id") or self._next_name(comp_type)
        children = self._expand_components(comp.get("children") or [])
        return ParsedNode(type=comp_type, name=name, properties=props, children=children)


def parse_blueprint(content: str) -> ParsedDocument:
    """
    Convenience function to parse Blueprint content

    Args:
        content: Blueprint JSON string
    """
    return BlueprintParser().parse(content)
