import sys

from nsintegrity.cli import main

sys.exit(main())
