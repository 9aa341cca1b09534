"""
Convenience entry point for running groomingslots as a module.

Usage: python -m groomingslots [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
