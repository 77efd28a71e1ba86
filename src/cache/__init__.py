"""Content-addressed storage for compiled output."""
