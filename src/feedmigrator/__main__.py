from __future__ import annotations

from feedmigrator.ui.cli import run

run()
