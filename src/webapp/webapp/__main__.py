# ABOUTME: Module entry point for `python -m webapp`
# ABOUTME: Delegates to the application entry point and exits with its status

import sys

from webapp.app import main

sys.exit(main())
