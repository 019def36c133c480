"""Command line tool for shran."""
