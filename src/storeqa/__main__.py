"""storeqa CLI entry point.

This module enables running storeqa as:
    python -m storeqa <command>
"""

from storeqa.cli import main

if __name__ == "__main__":
    main()
