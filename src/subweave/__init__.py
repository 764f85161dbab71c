"""SubWeave — lossless subtitle translation through LLM providers."""

__version__ = "0.1.0"
