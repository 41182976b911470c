"""In-memory task tracking HTTP API."""
