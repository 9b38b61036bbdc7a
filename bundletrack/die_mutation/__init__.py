"""Die mutation tasks."""
