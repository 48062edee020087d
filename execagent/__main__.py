import sys

from execagent.cli import main

sys.exit(main())
