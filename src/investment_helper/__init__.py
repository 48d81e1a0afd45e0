"""Investment Helper: RSS news collection and scheduled LLM investment reports."""

__version__ = "0.1.0"
