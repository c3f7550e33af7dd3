"""linkdrift command-line interface."""
