"""Document store API client."""
