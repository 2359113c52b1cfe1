# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

import pytest

from catchgen.config import GeneratorConfig, find_config, load_config_json


def _write(path: Path, obj: object) -> Path:
	path.write_text(json.dumps(obj), encoding="utf-8")
	return path


def test_load_config_reads_all_keys(tmp_path: Path) -> None:
	cfg = load_config_json(
		_write(
			tmp_path / "catchgen.json",
			{
				"known_types": ["HttpException"],
				"known_functions": ["report"],
				"assume_imported": False,
				"out_dir": "gen",
			},
		)
	)
	assert cfg == GeneratorConfig(
		known_types=("HttpException",),
		known_functions=("report",),
		assume_imported=False,
		out_dir=tmp_path / "gen",
	)


def test_empty_config_uses_defaults(tmp_path: Path) -> None:
	assert load_config_json(_write(tmp_path / "catchgen.json", {})) == GeneratorConfig()


@pytest.mark.parametrize(
	"obj, message",
	[
		([], "must be a JSON object"),
		({"known_types": "Exception"}, "must be a list of strings"),
		({"known_functions": [1]}, "must be a list of strings"),
		({"assume_imported": "yes"}, "must be a boolean"),
		({"out_dir": 3}, "must be a string"),
		({"verbose": True}, "unknown config key"),
	],
)
def test_malformed_config_is_rejected(tmp_path: Path, obj: object, message: str) -> None:
	with pytest.raises(ValueError, match=message):
		load_config_json(_write(tmp_path / "catchgen.json", obj))


def test_invalid_json_is_value_error(tmp_path: Path) -> None:
	path = tmp_path / "catchgen.json"
	path.write_text("{", encoding="utf-8")
	with pytest.raises(ValueError, match="not valid JSON"):
		load_config_json(path)


def test_merged_overrides_and_extends() -> None:
	base = GeneratorConfig(known_types=("A",), assume_imported=True)
	merged = base.merged(known_types=["B"], assume_imported=False, out_dir=Path("out"))
	assert merged.known_types == ("A", "B")
	assert merged.assume_imported is False
	assert merged.out_dir == Path("out")
	assert base.merged() == base


def test_find_config_walks_parents(tmp_path: Path) -> None:
	cfg = _write(tmp_path / "catchgen.json", {})
	nested = tmp_path / "lib" / "src"
	nested.mkdir(parents=True)
	assert find_config(nested) == cfg
