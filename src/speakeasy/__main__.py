"""Entry point for running speakeasy as a module."""

from .cli import app


def main() -> None:
    """Main entry point for the speakeasy CLI application."""
    app()


if __name__ == "__main__":
    main()
