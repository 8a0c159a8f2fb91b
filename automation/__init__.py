"""Command line tools built on the coverage core."""
