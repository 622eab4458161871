#!/usr/bin/env python
from khandeshwar_backend.diagnostics import main

if __name__ == "__main__":
    raise SystemExit(main())
