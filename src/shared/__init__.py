"""Shared kernel: error taxonomy, money, configuration and logging."""
