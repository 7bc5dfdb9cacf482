"""Match and ranking records."""
