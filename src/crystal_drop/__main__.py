"""Main entry point for the crystal_drop package."""
from crystal_drop.cli import cli


def main():
    """Main entry point function."""
    cli()


if __name__ == "__main__":
    main()
