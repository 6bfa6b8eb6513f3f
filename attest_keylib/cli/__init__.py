"""Command line interface for attest-keylib."""
