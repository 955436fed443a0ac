"""Core reconciliation engine, models and collaborators."""
