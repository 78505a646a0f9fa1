"""Message-queue consumer building blocks: model, allocation strategies, statistics and options."""

__version__ = "0.1.0"

__all__ = ["constants", "model", "push_options", "statistics", "strategy"]