"""Developer-assistant agent: bounded conversations, tool-using reasoning."""
