"""Models, runtime profiles, configuration and logging."""
