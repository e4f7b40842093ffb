"""kida integration for the root view."""
