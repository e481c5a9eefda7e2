import sys

from deploykit_cli.main import main

sys.exit(main())
