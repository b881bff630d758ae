"""
Entry point for running dohping as a module.

Usage: python -m dohping [OPTIONS] COMMAND [ARGS]...
"""

from .cli import main

if __name__ == "__main__":
    main()
