#!/usr/bin/env python3
import sys

from spfconv.cli import main

if __name__ == "__main__":
    sys.exit(main())
