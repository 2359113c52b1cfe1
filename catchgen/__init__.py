# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
catchgen: error-handler wrapper generator.

Annotated classes are read into a declaration graph (`catchgen.decls`), the
engine (`catchgen.emitter.ErrorHandlersBuilder`) renders one extension unit
per class, and `catchgen.build` assembles the generated part file. The CLI
entrypoint is `catchgen.cli:main`.
"""

from catchgen.emitter import ErrorHandlersBuilder, generate_unit
from catchgen.errors import InvalidGenerationSourceError

__all__ = ["ErrorHandlersBuilder", "InvalidGenerationSourceError", "generate_unit"]
