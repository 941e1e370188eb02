"""Configuration, database and pattern file loading."""
