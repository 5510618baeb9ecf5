"""Allow ``python -m tf_reconcile_reader``."""

import sys

from tf_reconcile_reader.cli import main

sys.exit(main())
