#!/usr/bin/env python3
"""
Convenience shim to run PopcornPal from a source checkout.
Usage: python popcornpal.py [--check|--help|--config PATH|--debug]
"""

from popcornpal.cli import main


if __name__ == "__main__":
    main()
