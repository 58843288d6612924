"""Command line: argument parsing, commands, bootstrap, entry point."""
