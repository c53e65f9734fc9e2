"""ctxengine command-line interface."""
