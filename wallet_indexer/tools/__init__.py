"""One-shot command line tools."""
