"""Proto file model, C++ header generation and a streaming JSON reader for messages."""

__version__ = "1.0.0"