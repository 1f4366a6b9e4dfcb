"""Wire schemas, errors, session and screen view-models."""
