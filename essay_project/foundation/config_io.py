from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

CONFIG_ENV_VAR = "ESSAY_PROJECT_CONFIG"
PROJECT_MARKERS = ("pyproject.toml", ".git")


def find_project_root(
    start: str | os.PathLike[str] | None = None,
    *,
    config_file: str = os.path.join("config", "config.yaml"),
) -> str | None:
    """
    Nearest directory at or above `start` that owns the essay project.

    A directory holding `config_file` wins over one that only carries a
    project marker (pyproject.toml or .git). Returns None when neither is found.
    """

    start_path = Path(start or os.getcwd()).resolve()
    if start_path.is_file():
        start_path = start_path.parent
    candidates = (start_path, *start_path.parents)

    for candidate in candidates:
        if (candidate / config_file).is_file():
            return str(candidate)
    for candidate in candidates:
        if any((candidate / marker).exists() for marker in PROJECT_MARKERS):
            return str(candidate)
    return None


def load_yaml_mapping(path: str) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ValueError(f"Config file must contain a YAML mapping: {path}")
    return dict(payload)


def _kind(value: Any) -> str:
    if isinstance(value, Mapping):
        return "mapping"
    if isinstance(value, (list, tuple)):
        return "list"
    return "scalar"


def deep_merge(base: Any, overlay: Any, *, path: str = "") -> Any:
    """
    Overlay `config.local.yaml` values onto the base config.

    Mappings merge key by key; lists and scalars are replaced whole. An
    explicit null in the overlay clears the base value. Values of different
    kinds (mapping, list, scalar) never replace each other.
    """

    if overlay is None or base is None:
        return overlay

    base_kind, overlay_kind = _kind(base), _kind(overlay)
    if base_kind != overlay_kind:
        raise ValueError(
            f"Invalid config overlay merge at {path or '<root>'}: {overlay_kind} cannot replace {base_kind}"
        )
    if base_kind == "list":
        return list(overlay)
    if base_kind == "scalar":
        return overlay

    merged: dict[str, Any] = dict(base)
    for key, value in overlay.items():
        key_path = f"{path}.{key}" if path else str(key)
        merged[key] = deep_merge(base.get(key), value, path=key_path) if key in base else value
    return merged


def load_config(
    *,
    config_path: str | os.PathLike[str] | None = None,
    env_var: str | None = CONFIG_ENV_VAR,
    config_name: str = "config",
    config_type: str = ".yaml",
    config_rel_path: str = "config",
    start_dir: str | None = None,
    required: bool = True,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Load the site configuration, returning (cfg, meta).

    An explicit path (argument or environment variable) loads that single file.
    Otherwise `<project root>/config/config.yaml` is loaded and deep-merged with
    `config.local.yaml` from the same directory when present. With
    `required=False` a missing base file yields an empty config.
    """

    explicit_path = None
    if config_path is not None:
        explicit_path = str(config_path).strip() or None
    elif env_var:
        raw_env = os.environ.get(str(env_var), "")
        explicit_path = raw_env.strip() or None

    if explicit_path:
        expanded = os.path.abspath(os.path.expandvars(os.path.expanduser(explicit_path)))
        cfg = load_yaml_mapping(expanded)
        meta = {
            "mode": "env" if config_path is None else "explicit",
            "paths": [expanded],
            "env_var": env_var,
            "config_dir": os.path.dirname(expanded),
        }
        return cfg, meta

    repo_root: str | None = None
    if os.path.isabs(str(config_rel_path)):
        config_directory = str(config_rel_path)
    else:
        repo_root = find_project_root(start_dir, config_file=os.path.join(str(config_rel_path), config_name + config_type))
        if repo_root is None:
            start = os.path.abspath(start_dir or os.getcwd())
            if required:
                raise FileNotFoundError(
                    f"Cannot locate the essay project from {start}: no {config_rel_path}/{config_name}{config_type} "
                    f"and no {', '.join(PROJECT_MARKERS)} in it or its parents"
                )
            repo_root = start
        config_directory = os.path.join(repo_root, str(config_rel_path))
    base_config_path = os.path.join(config_directory, config_name + config_type)
    local_overlay_path = os.path.join(config_directory, f"{config_name}.local{config_type}")

    if not os.path.exists(base_config_path):
        if required:
            raise FileNotFoundError(f"Missing base config file: {base_config_path}")
        meta = {"mode": "defaults", "paths": [], "env_var": env_var, "config_dir": None, "repo_root": repo_root}
        return {}, meta

    cfg = load_yaml_mapping(base_config_path)
    loaded_paths = [os.path.abspath(base_config_path)]
    mode = "base"

    if os.path.exists(local_overlay_path):
        overlay = load_yaml_mapping(local_overlay_path)
        cfg = deep_merge(cfg, overlay, path="")
        loaded_paths.append(os.path.abspath(local_overlay_path))
        mode = "base+local"

    meta = {
        "mode": mode,
        "paths": loaded_paths,
        "env_var": env_var,
        "config_dir": os.path.abspath(config_directory),
        "repo_root": repo_root,
    }
    return cfg, meta
