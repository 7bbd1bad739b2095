"""
Allows the package to be run as a script.

Example:
    python -m signing_resolver resolve --project-root ./my_app
"""

from .cli import app

if __name__ == "__main__":
    app()
