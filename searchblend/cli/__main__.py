"""CLI package entry point.

Allows running the CLI as: python -m searchblend.cli
"""

from searchblend.cli.main import cli_main

if __name__ == "__main__":
    cli_main()
