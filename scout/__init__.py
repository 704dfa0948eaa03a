"""Doc Gatekeeper - discovery and AI relevance filtering engine."""
