"""Main entry point for the MyList CLI.

Usage:
    python -m mylist --help
    mylist --help  # If installed via pip/uv
"""

from mylist.cli import main

if __name__ == "__main__":
    main()
