#!/usr/bin/env python3
"""Main entry point for IntelliSOC."""

from intellisoc.main import main


if __name__ == "__main__":
    main()
