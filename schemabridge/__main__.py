# File: schemabridge/__main__.py
"""
Schema Bridge - Module entry point.

Allows running the generator directly via::

    python -m schemabridge --config blog.yaml --output ./blog-api

This module simply delegates to the CLI entry point defined in ``schemabridge.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from schemabridge.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
