"""Allow ``python -m vault_publish``."""

from .cli import run

run()
