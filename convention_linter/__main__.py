"""Allow ``python -m convention_linter``."""

from convention_linter.cli import app

app(prog_name="convention-linter")
