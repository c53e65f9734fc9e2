"""ctxengine - context retrieval and ranking for code assistants."""

__version__ = "0.1.0"
