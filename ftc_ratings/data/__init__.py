"""Match loading and payload validation."""
