"""Entry point for `python -m pvcrestart`.

Usage:
    python -m pvcrestart --type glusterfs
    uv run python -m pvcrestart --name-regex '^pvc-' --delete
"""

from __future__ import annotations

from pvcrestart.cli import cli

cli(prog_name="pvc-restart")
