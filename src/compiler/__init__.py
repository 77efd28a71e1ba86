"""Compiler backends, skip heuristics and the cache coordinator."""
