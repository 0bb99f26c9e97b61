"""Run configuration merged from CLI flags, a config file and the environment."""

from __future__ import annotations

import argparse
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .exceptions import ConfigError, UnknownVariantError
from .keys import KeyVariant, resolve_variant

LOGGER = logging.getLogger(__name__)

VARIANT_ENV_VAR = "SEGACRP2_VARIANT"
DEFAULT_OUTPUT_DIR = Path("out")


@dataclass
class DecryptConfig:
    """Settings for one ``decrypt`` run."""

    variant: KeyVariant
    inputs: List[Path] = field(default_factory=list)
    output_dir: Path = DEFAULT_OUTPUT_DIR
    stem: Optional[str] = None
    pad_to: Optional[int] = None
    trace_file: Optional[Path] = None
    verbose: bool = False

    @property
    def output_stem(self) -> str:
        if self.stem:
            return self.stem
        if self.inputs:
            return self.inputs[0].stem
        return self.variant.device


def load_config(path: str | Path) -> Dict[str, Any]:
    """Return the mapping stored in the YAML (or JSON) file at ``path``."""

    config_path = Path(path)
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"unable to read config file {config_path}: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid config file {config_path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {config_path} must contain a mapping")
    return data


def _parse_size(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int):
        size = value
    else:
        try:
            size = int(str(value).strip(), 0)
        except ValueError:
            raise ConfigError(f"invalid size: {value!r}") from None
    if size <= 0:
        raise ConfigError(f"size must be positive: {value!r}")
    return size


def _pick(cli_value: Any, file_config: Mapping[str, Any], key: str) -> Any:
    if cli_value not in (None, [], ""):
        return cli_value
    return file_config.get(key)


def build_config(args: argparse.Namespace, *, env: Optional[Mapping[str, str]] = None) -> DecryptConfig:
    """Merge ``args`` with the optional config file and environment.

    Command line values win over the config file, which wins over
    ``SEGACRP2_VARIANT``.
    """

    environ = os.environ if env is None else env
    config_path = getattr(args, "config", None)
    file_config = load_config(config_path) if config_path else {}

    variant_name = _pick(getattr(args, "variant", None), file_config, "variant")
    if not variant_name:
        variant_name = environ.get(VARIANT_ENV_VAR)
        if variant_name:
            LOGGER.debug("using variant %s from %s", variant_name, VARIANT_ENV_VAR)
    if not variant_name:
        raise ConfigError(f"no key variant given (use --variant or {VARIANT_ENV_VAR})")
    try:
        variant = resolve_variant(variant_name)
    except UnknownVariantError as exc:
        raise ConfigError(str(exc)) from exc

    raw_inputs = _pick(getattr(args, "inputs", None), file_config, "inputs") or []
    if isinstance(raw_inputs, (str, Path)):
        raw_inputs = [raw_inputs]
    inputs = [Path(entry) for entry in raw_inputs]
    if not inputs:
        raise ConfigError("no ROM files given")

    output_dir = _pick(getattr(args, "output_dir", None), file_config, "output_dir")
    trace_file = _pick(getattr(args, "trace", None), file_config, "trace_file")

    return DecryptConfig(
        variant=variant,
        inputs=inputs,
        output_dir=Path(output_dir) if output_dir else DEFAULT_OUTPUT_DIR,
        stem=_pick(getattr(args, "stem", None), file_config, "stem"),
        pad_to=_parse_size(_pick(getattr(args, "pad_to", None), file_config, "pad_to")),
        trace_file=Path(trace_file) if trace_file else None,
        verbose=bool(getattr(args, "verbose", False) or file_config.get("verbose", False)),
    )


__all__ = ["DEFAULT_OUTPUT_DIR", "DecryptConfig", "VARIANT_ENV_VAR", "build_config", "load_config"]
