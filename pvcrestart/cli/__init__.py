"""pvc-restart command-line interface.

Exposes:
    cli -- Click command entry point (registered as ``pvc-restart`` script).
"""

from pvcrestart.cli.main import cli

__all__ = ["cli"]
