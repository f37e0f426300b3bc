"""Core types, event bus and stream dispatcher."""
