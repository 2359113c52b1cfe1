# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Generator configuration.

A project may keep its settings in `catchgen.json`:

	{
	  "known_types": ["HttpException"],
	  "known_functions": ["reportToSentry"],
	  "assume_imported": true,
	  "out_dir": "lib/generated"
	}

Every key is optional. Command-line flags override the file.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

DEFAULT_CONFIG_NAME = "catchgen.json"

_KNOWN_KEYS = frozenset({"known_types", "known_functions", "assume_imported", "out_dir"})


@dataclass(frozen=True)
class GeneratorConfig:
	known_types: tuple[str, ...] = ()
	known_functions: tuple[str, ...] = ()
	# Bare identifiers the file cannot see are classified by naming convention.
	assume_imported: bool = True
	# None writes `<name>.g.dart` beside each source file.
	out_dir: Optional[Path] = None

	def merged(
		self,
		known_types: Optional[list[str]] = None,
		known_functions: Optional[list[str]] = None,
		assume_imported: Optional[bool] = None,
		out_dir: Optional[Path] = None,
	) -> "GeneratorConfig":
		"""Copy with command-line overrides applied (None leaves a value alone)."""
		cfg = self
		if known_types:
			cfg = replace(cfg, known_types=cfg.known_types + tuple(known_types))
		if known_functions:
			cfg = replace(cfg, known_functions=cfg.known_functions + tuple(known_functions))
		if assume_imported is not None:
			cfg = replace(cfg, assume_imported=assume_imported)
		if out_dir is not None:
			cfg = replace(cfg, out_dir=out_dir)
		return cfg


def _string_list(obj: dict[str, Any], key: str) -> tuple[str, ...]:
	value = obj.get(key, [])
	if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
		raise ValueError(f"config '{key}' must be a list of strings")
	return tuple(value)


def load_config_json(path: Path) -> GeneratorConfig:
	"""
	Load a generator config file.

	Raises ValueError on malformed content. Relative `out_dir` values are taken
	relative to the config file's directory.
	"""
	try:
		obj = json.loads(path.read_text(encoding="utf-8"))
	except json.JSONDecodeError as err:
		raise ValueError(f"config is not valid JSON: {err}") from err
	if not isinstance(obj, dict):
		raise ValueError("config must be a JSON object")
	unknown = sorted(set(obj) - _KNOWN_KEYS)
	if unknown:
		raise ValueError(f"unknown config key(s): {', '.join(unknown)}")
	assume = obj.get("assume_imported", True)
	if not isinstance(assume, bool):
		raise ValueError("config 'assume_imported' must be a boolean")
	out_dir = obj.get("out_dir")
	if out_dir is not None and not isinstance(out_dir, str):
		raise ValueError("config 'out_dir' must be a string")
	return GeneratorConfig(
		known_types=_string_list(obj, "known_types"),
		known_functions=_string_list(obj, "known_functions"),
		assume_imported=assume,
		out_dir=(path.parent / out_dir) if out_dir is not None else None,
	)


def find_config(start: Path) -> Optional[Path]:
	"""Nearest `catchgen.json` in `start` or one of its parents."""
	for directory in (start, *start.parents):
		candidate = directory / DEFAULT_CONFIG_NAME
		if candidate.is_file():
			return candidate
	return None


__all__ = ["DEFAULT_CONFIG_NAME", "GeneratorConfig", "find_config", "load_config_json"]
