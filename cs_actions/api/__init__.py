"""HTTP API of the action runner."""
