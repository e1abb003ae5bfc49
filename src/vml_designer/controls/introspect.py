"""Reflection over live controls for the control channel."""

import inspect
import typing
from typing import Any, Iterable

from vml_designer.core import DesignerError
from .accessors import accessors_for
from .base import Control
from .convert import parse_value, type_label


def _exposed_methods(control: Control) -> dict[str, Any]:
    methods = {}
    for attr in dir(type(control)):
        if attr.startswith("_"):
            continue
        func = getattr(type(control), attr, None)
        if callable(func) and getattr(func, "__vml_method__", False):
            methods[attr] = getattr(control, attr)
    return methods


def _method_parameters(method: Any) -> list[dict[str, str]]:
    hints = typing.get_type_hints(method)
    params = []
    for param in inspect.signature(method).parameters.values():
        params.append({"name": param.name, "type": type_label(hints.get(param.name, str))})
    return params


def summarize(control: Control) -> dict[str, Any]:
    bounds = control.bounds()
    return {
        "name": control.name,
        "type": control.type_name,
        "path": control.path(),
        "bounds": bounds._asdict(),
    }


def list_controls(roots: Iterable[Control]) -> list[dict[str, Any]]:
    """Every named control reachable from the roots."""
    result = []
    for root in roots:
        for control in root.walk():
            if control.name:
                result.append(summarize(control))
    return result


def describe(control: Control) -> dict[str, Any]:
    """Properties, methods, events and children of one control."""
    info = summarize(control)
    info["properties"] = [
        {
            "name": accessor.name,
            "type": accessor.type_label,
            "value": accessor.read_text(control),
            "writable": accessor.writable,
        }
        for accessor in accessors_for(type(control)).values()
    ]
    info["attached"] = {key: str(value) for key, value in control.attached.items()}
    info["methods"] = [
        {"name": name, "parameters": _method_parameters(method)}
        for name, method in sorted(_exposed_methods(control).items())
    ]
    info["events"] = list(type(control).events)
    info["children"] = [child.name for child in control.children]
    return info


def invoke_method(control: Control, method: str, args: list[Any] | None = None) -> Any:
    """
    Call an exposed method, converting string arguments to parameter types.

    Raises:
        DesignerError: Unknown method or wrong argument count
    """
    methods = _exposed_methods(control)
    target = methods.get(method) or next(
        (m for name, m in methods.items() if name.replace("_", "").lower() == method.lower()),
        None,
    )
    if target is None:
        raise DesignerError(f"{control.type_name} has no method {method}")

    args = list(args or [])
    hints = typing.get_type_hints(target)
    params = list(inspect.signature(target).parameters.values())
    if len(args) != len(params):
        raise DesignerError(f"{method} expects {len(params)} arguments, got {len(args)}")

    converted = [
        parse_value(hints.get(param.name, str), arg, param.name) if isinstance(arg, str) else arg
        for param, arg in zip(params, args)
    ]
    return target(*converted)


def fire_event(control: Control, event: str) -> int:
    """Raise an event on a control; returns how many handlers ran."""
    return control.raise_event(event)
