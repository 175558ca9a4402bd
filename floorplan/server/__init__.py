"""HTTP API for reading and editing the layout."""
