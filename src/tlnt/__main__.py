"""Allow ``python -m tlnt``."""

from tlnt.main import run

run()
