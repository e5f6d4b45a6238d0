"""Brand Score — lead-generation brand audit service."""
