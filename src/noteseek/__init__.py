"""noteseek: semantic similarity search over a corpus of text notes."""

__version__ = "0.1.0"
