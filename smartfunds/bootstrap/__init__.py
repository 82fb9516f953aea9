"""Composition root: wires configuration, storage, clock and engine."""
