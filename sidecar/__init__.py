"""Sidecar client: transcript reconciliation for an agent host's event stream."""
