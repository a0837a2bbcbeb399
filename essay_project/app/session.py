from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

from essay_project.foundation.config_io import CONFIG_ENV_VAR, load_config
from essay_project.foundation.logging_utils import setup_command_logger
from essay_project.framework.config import SiteConfig


@dataclass
class CommandSession:
    command: str
    config: SiteConfig
    logger: logging.Logger
    config_meta: dict[str, Any]


def _config_base_dir(meta: dict[str, Any]) -> str:
    mode = meta.get("mode")
    config_dir = meta.get("config_dir")
    if mode in {"base", "base+local"} and config_dir:
        return os.path.dirname(config_dir)
    if mode in {"env", "explicit"} and config_dir:
        return config_dir
    return os.getcwd()


def _log_config_meta(logger: logging.Logger, meta: dict[str, Any]) -> None:
    mode = meta.get("mode")
    paths = meta.get("paths") or []
    env_var = meta.get("env_var") or CONFIG_ENV_VAR
    if mode in {"env", "explicit"} and paths:
        label = f"env {env_var}" if mode == "env" else "explicit path"
        logger.info("Loaded config from %s=%s", label, paths[0])
    elif paths:
        base = paths[0]
        local = paths[1] if len(paths) > 1 else None
        if local:
            logger.info("Loaded config base=%s local=%s", base, local)
        else:
            logger.info("Loaded config base=%s", base)
    else:
        logger.info("No config file found; using defaults")


def open_session(
    command: str,
    *,
    config_path: Optional[str] = None,
    root: Optional[str] = None,
    output_dir: Optional[str] = None,
    include_drafts: Optional[bool] = None,
    strict: Optional[bool] = None,
) -> CommandSession:
    """Load configuration, apply command-line overrides and set up the command logger."""

    cfg_dict, meta = load_config(config_path=config_path, required=False)
    config, warnings = SiteConfig.from_dict(cfg_dict, base_dir=_config_base_dir(meta))

    overrides: dict[str, Any] = {}
    if root:
        overrides["source_root"] = os.path.abspath(root)
    if output_dir:
        overrides["output_dir"] = os.path.abspath(output_dir)
    if include_drafts is not None:
        overrides["include_drafts"] = include_drafts
    if strict is not None:
        overrides["lint_strict"] = strict
    if overrides:
        config = dataclasses.replace(config, **overrides)

    logger = setup_command_logger(command, level=config.log_level_value, log_dir=config.log_dir)
    _log_config_meta(logger, meta)
    for warning in warnings:
        logger.warning("%s", warning)
    return CommandSession(command=command, config=config, logger=logger, config_meta=meta)
