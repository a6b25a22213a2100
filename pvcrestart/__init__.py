"""pvc-restart: find and restart pods by the storage backing their claims."""

__version__ = "0.3.0"
