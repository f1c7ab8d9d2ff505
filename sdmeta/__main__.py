import sys

from sdmeta.cli import main

sys.exit(main())
