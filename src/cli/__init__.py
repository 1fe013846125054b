"""Command-line interface: typer commands and rich rendering."""
