from __future__ import annotations

"""
Module Model Loader.

Reads the JSON snapshot of a host build (the "module model") and turns it
into a ModuleSpec hierarchy. Relative paths are anchored on the directory
holding the model file. Declarative 'properties' and 'append_properties'
blocks become override callbacks run at computation time.
"""

import json
import logging
import os
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from scanprops.domain.errors import ModelLoadError
from scanprops.domain.module_models import ROOT_PATH, JdkSettings, ModuleSpec, OverrideCallback
from scanprops.infra.fs import resolve_against

logger = logging.getLogger(__name__)

_PATH_FIELDS = ("build_dir", "build_file", "test_results_dir", "jacoco_xml_report")
_PATH_LIST_FIELDS = (
    "source_dirs",
    "test_dirs",
    "main_output_dirs",
    "test_output_dirs",
    "compile_classpath",
    "test_compile_classpath",
)
_LANGUAGES = ("java", "groovy", "kotlin")


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def load_model(
        path: str,
        extra_overrides: Optional[Mapping[str, Sequence[OverrideCallback]]] = None,
) -> ModuleSpec:
    """
    Load a module model file.

    Args:
        path: JSON model file.
        extra_overrides: Additional callbacks keyed by module path, appended
                         after the ones declared in the file.

    Returns:
        ModuleSpec: The root module with its children.

    Raises:
        ModelLoadError: If the file is missing, not valid JSON or malformed.
    """
    model_path = os.path.abspath(path)
    if not os.path.isfile(model_path):
        raise ModelLoadError(f"Module model not found: {model_path}")

    try:
        with open(model_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ModelLoadError(f"Cannot read module model {model_path}: {e}") from e

    root = parse_module(data, os.path.dirname(model_path))

    if extra_overrides:
        _attach_overrides(root, extra_overrides)

    logger.info(f"Loaded module model '{root.name}' from {model_path}")
    return root


def parse_module(data: Any, base_dir: str, parent: Optional[ModuleSpec] = None) -> ModuleSpec:
    """
    Build one ModuleSpec (and its children) from its JSON mapping.

    Args:
        data: Decoded JSON object of the module.
        base_dir: Directory against which relative paths are resolved.
        parent: Parent module, None for the root.

    Returns:
        ModuleSpec: The parsed module.
    """
    if not isinstance(data, dict):
        raise ModelLoadError(f"Module entry must be an object, got {type(data).__name__}")

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ModelLoadError("Every module needs a non-empty 'name'")
    name = name.strip()

    module_path = data.get("path") or _default_path(name, parent)
    project_dir = data.get("project_dir")
    if project_dir:
        project_dir = resolve_against(base_dir, project_dir)
    elif parent is None:
        project_dir = os.path.abspath(base_dir)
    else:
        project_dir = os.path.join(parent.project_dir, name)

    language = str(data.get("language") or "java").lower()
    if language not in _LANGUAGES:
        raise ModelLoadError(f"Unsupported language '{language}' for module {module_path}")

    spec = ModuleSpec(
        path=module_path,
        name=name,
        project_dir=project_dir,
        group=str(data.get("group") or (parent.group if parent else "")),
        description=data.get("description"),
        version=str(data.get("version") or (parent.version if parent else "unspecified")),
        skip=bool(data.get("skip", False)),
        language=language,
        source_encoding=data.get("source_encoding"),
        jdk=_parse_jdk(data.get("jdk"), base_dir),
    )

    for field_name in _PATH_FIELDS:
        value = data.get(field_name)
        if value:
            setattr(spec, field_name, resolve_against(base_dir, value))

    for field_name in _PATH_LIST_FIELDS:
        setattr(spec, field_name, [resolve_against(base_dir, p) for p in _as_list(data, field_name)])

    spec.overrides.extend(_declarative_overrides(data, module_path))

    for child_data in _as_list(data, "children", item_type=dict):
        spec.children.append(parse_module(child_data, base_dir, spec))

    return spec


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _default_path(name: str, parent: Optional[ModuleSpec]) -> str:
    if parent is None:
        return ROOT_PATH
    if parent.path == ROOT_PATH:
        return f":{name}"
    return f"{parent.path}:{name}"


def _as_list(data: Dict[str, Any], key: str, item_type: type = str) -> List[Any]:
    value = data.get(key) or []
    if not isinstance(value, list) or not all(isinstance(v, item_type) for v in value):
        raise ModelLoadError(f"Field '{key}' must be a list of {item_type.__name__}")
    return value


def _parse_jdk(data: Any, base_dir: str) -> Optional[JdkSettings]:
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ModelLoadError("Field 'jdk' must be an object")

    def _opt(key: str) -> Optional[str]:
        value = data.get(key)
        return None if value is None else str(value)

    jdk_home = _opt("jdk_home")
    return JdkSettings(
        release=_opt("release"),
        source=_opt("source"),
        target=_opt("target"),
        jdk_home=resolve_against(base_dir, jdk_home) if jdk_home else None,
        enable_preview=bool(data.get("enable_preview", False)),
    )


def _declarative_overrides(data: Dict[str, Any], module_path: str) -> List[OverrideCallback]:
    callbacks: List[OverrideCallback] = []

    values = data.get("properties")
    if values is not None:
        if not isinstance(values, dict):
            raise ModelLoadError(f"'properties' of module {module_path} must be an object")
        callbacks.append(_set_properties(dict(values)))

    appended = data.get("append_properties")
    if appended is not None:
        if not isinstance(appended, dict) or not all(isinstance(v, list) for v in appended.values()):
            raise ModelLoadError(f"'append_properties' of module {module_path} must map keys to lists")
        callbacks.append(_append_properties({k: list(v) for k, v in appended.items()}))

    return callbacks


def _set_properties(values: Dict[str, Any]) -> Callable[[Any], None]:
    def _apply(bag: Any) -> None:
        bag.properties(values)
    return _apply


def _append_properties(values: Dict[str, List[Any]]) -> Callable[[Any], None]:
    def _apply(bag: Any) -> None:
        for key, items in values.items():
            bag.append(key, items)
            bag.mark_user_defined(key)
    return _apply


def _attach_overrides(root: ModuleSpec, extra: Mapping[str, Sequence[OverrideCallback]]) -> None:
    pending = dict(extra)

    def _visit(spec: ModuleSpec) -> None:
        callbacks = pending.pop(spec.path, None)
        if callbacks:
            spec.overrides.extend(callbacks)
        for child in spec.children:
            _visit(child)

    _visit(root)
    for unknown in pending:
        logger.warning(f"Ignoring overrides for unknown module {unknown}")
