import sys

from propcheck.main import main

sys.exit(main())
