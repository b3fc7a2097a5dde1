"""StreamScribe - streaming speech-to-text client with incremental transcript reconciliation."""

__version__ = "0.1.0"
