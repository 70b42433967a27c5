"""Concrete service implementations: engine, store, notifier, player, progress."""
