"""Allow running commit-buddy as ``python -m commit_buddy``."""

import sys

from commit_buddy.cli import main

if __name__ == "__main__":
	sys.exit(main())
