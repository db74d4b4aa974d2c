"""Command-line front end for Gifmoji."""
