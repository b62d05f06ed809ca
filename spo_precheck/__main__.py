import sys

from spo_precheck.cli.controller import main

if __name__ == "__main__":
    sys.exit(main())
