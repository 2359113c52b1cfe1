# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolate_working_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
	"""
	Driver tests run inside their own tmp_path.

	The CLI discovers `catchgen.json` from the working directory upwards, so a
	config file in the checkout must not leak into tests.
	"""
	monkeypatch.chdir(tmp_path)
