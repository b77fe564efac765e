import sys

from gitcui.cli import main

sys.exit(main())
