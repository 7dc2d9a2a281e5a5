import sys

from careerfetch.cli import main

sys.exit(main())
