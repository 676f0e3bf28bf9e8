"""CPA authorization server."""
