"""OpenAI pass-through endpoints and generated-file storage."""
