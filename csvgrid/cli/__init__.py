"""Command line interface (typer) for inspecting catalogs and decoding files."""
