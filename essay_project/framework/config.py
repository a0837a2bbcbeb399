from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping

DEFAULT_EXTENSIONS: tuple[str, ...] = (".md", ".markdown")
DEFAULT_KNOWN_LAYOUTS: tuple[str, ...] = ("default", "post", "page")
DEFAULT_NEAR_DUPLICATE_THRESHOLD = 0.9
LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR")


def parse_bool(value: Any, path: str) -> bool:
    """
    Strict boolean parsing to avoid bool('false') footguns.

    Accepts:
      - True/False
      - 0/1 (ints)
      - strings: true/false/1/0/yes/no (case-insensitive, surrounding whitespace ignored)

    Raises:
      ValueError for anything else, with the provided config key path.
    """

    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        raise ValueError(f"Invalid boolean for {path}: {value!r}")
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"true", "1", "yes"}:
            return True
        if normalized in {"false", "0", "no"}:
            return False
        raise ValueError(f"Invalid boolean for {path}: {value!r}")

    raise ValueError(f"Invalid boolean for {path}: {value!r}")


def parse_float(value: Any, path: str) -> float:
    if value is None:
        raise ValueError(f"Invalid config value for {path}: None")
    if isinstance(value, bool):
        raise ValueError(f"Invalid config type for {path}: expected float, got bool")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        if not value.strip():
            raise ValueError(f"Invalid config value for {path}: must be a float")
        try:
            return float(value.strip())
        except ValueError as exc:
            raise ValueError(f"Invalid config value for {path}: must be a float") from exc
    raise ValueError(f"Invalid config type for {path}: expected float")


def parse_str_list(value: Any, path: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"Invalid config type for {path}: expected list of strings")
    items: list[str] = []
    for idx, item in enumerate(value):
        if not isinstance(item, str) or not item.strip():
            raise ValueError(f"Invalid config value for {path}[{idx}]: expected non-empty string")
        items.append(item.strip())
    return tuple(items)


_SCHEMA: Mapping[str, Mapping[str, Any]] = {
    "site": {"title": None, "base_url": None},
    "source": {"root": None, "posts_dir": None, "drafts_dir": None, "extensions": None},
    "build": {"output_dir": None, "include_drafts": None, "fail_on_lint_errors": None},
    "lint": {
        "known_layouts": None,
        "disabled_rules": None,
        "near_duplicate_threshold": None,
        "strict": None,
    },
    "logging": {"log_dir": None, "level": None},
}


def collect_unknown_keys(cfg: Mapping[str, Any]) -> list[str]:
    unknown: list[str] = []
    for key, value in cfg.items():
        if key == "strict":
            continue
        if key not in _SCHEMA:
            unknown.append(str(key))
            continue
        if not isinstance(value, Mapping):
            continue
        for sub_key in value:
            if sub_key not in _SCHEMA[key]:
                unknown.append(f"{key}.{sub_key}")
    return sorted(set(unknown))


@dataclass(frozen=True)
class SiteConfig:
    site_title: str = "Essays"
    base_url: str = ""
    source_root: str = "."
    posts_dir: str = "_posts"
    drafts_dir: str = "_drafts"
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    output_dir: str | None = None
    include_drafts: bool = False
    fail_on_lint_errors: bool = True
    known_layouts: tuple[str, ...] = DEFAULT_KNOWN_LAYOUTS
    disabled_rules: tuple[str, ...] = ()
    near_duplicate_threshold: float = DEFAULT_NEAR_DUPLICATE_THRESHOLD
    lint_strict: bool = False
    log_dir: str | None = None
    log_level: str = "INFO"

    @property
    def resolved_output_dir(self) -> str:
        return self.output_dir or os.path.join(self.source_root, "_site")

    def static_excludes(self, root: str) -> tuple[str, ...]:
        """Root-relative prefixes that are never static content: the source dirs and an in-tree output dir."""
        excluded = [self.posts_dir, self.drafts_dir]
        root = os.path.abspath(root)
        output_dir = os.path.abspath(self.resolved_output_dir)
        if output_dir.startswith(root.rstrip(os.sep) + os.sep):
            excluded.append(os.path.relpath(output_dir, root))
        return tuple(excluded)

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)

    @staticmethod
    def from_dict(
        cfg: Mapping[str, Any],
        *,
        base_dir: str | None = None,
    ) -> tuple["SiteConfig", list[str]]:
        """
        Parse and validate configuration, returning (SiteConfig, warnings).

        Relative paths resolve against `base_dir` (the current directory when omitted).

        Raises:
            ValueError: if a key has an invalid type or value, or on unknown keys in strict mode.
        """

        if not isinstance(cfg, Mapping):
            raise ValueError("Config must be a mapping")

        warnings: list[str] = []
        root_dir = os.path.abspath(base_dir or os.getcwd())

        strict_unknown_keys = False
        if "strict" in cfg:
            strict_unknown_keys = parse_bool(cfg.get("strict"), "strict")

        unknown_keys = collect_unknown_keys(cfg)
        if unknown_keys:
            if strict_unknown_keys:
                raise ValueError("Unknown config keys: " + ", ".join(unknown_keys))
            warnings.extend(f"Unknown config key: {key}" for key in unknown_keys)

        def lookup(path: str) -> Any:
            cur: Any = cfg
            for part in path.split("."):
                if not isinstance(cur, Mapping) or part not in cur:
                    return None
                cur = cur[part]
            return cur

        for section in _SCHEMA:
            value = cfg.get(section)
            if value is not None and not isinstance(value, Mapping):
                raise ValueError(f"Invalid config type for {section}: expected mapping")

        def optional_str(path: str) -> str | None:
            value = lookup(path)
            if value is None:
                return None
            if not isinstance(value, str):
                raise ValueError(f"Invalid config type for {path}: expected string")
            if not value.strip():
                return None
            return value.strip()

        def optional_bool(path: str, default: bool) -> bool:
            value = lookup(path)
            if value is None:
                return default
            return parse_bool(value, path)

        def normalize_path(value: str) -> str:
            expanded = os.path.expandvars(os.path.expanduser(value))
            if not os.path.isabs(expanded):
                expanded = os.path.join(root_dir, expanded)
            return os.path.abspath(expanded)

        def dir_name(path: str, default: str) -> str:
            value = optional_str(path) or default
            if os.path.isabs(value) or ".." in value.replace("\\", "/").split("/"):
                raise ValueError(f"Invalid config value for {path}: must be a path inside source.root")
            return value.strip("/")

        extensions = parse_str_list(lookup("source.extensions"), "source.extensions") or DEFAULT_EXTENSIONS
        extensions = tuple(ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions)

        threshold_raw = lookup("lint.near_duplicate_threshold")
        threshold = DEFAULT_NEAR_DUPLICATE_THRESHOLD
        if threshold_raw is not None:
            threshold = parse_float(threshold_raw, "lint.near_duplicate_threshold")
            if not 0.0 <= threshold <= 1.0:
                raise ValueError(
                    "Invalid config value for lint.near_duplicate_threshold: must be between 0 and 1"
                )

        known_layouts = parse_str_list(lookup("lint.known_layouts"), "lint.known_layouts")

        log_level = (optional_str("logging.level") or "INFO").upper()
        if log_level not in LOG_LEVELS:
            raise ValueError(
                f"Invalid config value for logging.level: {log_level!r} (expected one of {', '.join(LOG_LEVELS)})"
            )

        log_dir = optional_str("logging.log_dir")
        output_dir = optional_str("build.output_dir")

        config = SiteConfig(
            site_title=optional_str("site.title") or "Essays",
            base_url=(optional_str("site.base_url") or "").rstrip("/"),
            source_root=normalize_path(optional_str("source.root") or "."),
            posts_dir=dir_name("source.posts_dir", "_posts"),
            drafts_dir=dir_name("source.drafts_dir", "_drafts"),
            extensions=extensions,
            output_dir=normalize_path(output_dir) if output_dir else None,
            include_drafts=optional_bool("build.include_drafts", False),
            fail_on_lint_errors=optional_bool("build.fail_on_lint_errors", True),
            known_layouts=known_layouts or DEFAULT_KNOWN_LAYOUTS,
            disabled_rules=parse_str_list(lookup("lint.disabled_rules"), "lint.disabled_rules"),
            near_duplicate_threshold=threshold,
            lint_strict=optional_bool("lint.strict", False),
            log_dir=normalize_path(log_dir) if log_dir else None,
            log_level=log_level,
        )
        return config, warnings
