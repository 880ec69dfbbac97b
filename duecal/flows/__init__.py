"""Business flow layer.

This package contains the batch/preview flows built on the pure scheduling engine.

Note: Importing any module from this package automatically triggers dependency
      registration via the import below. CLI/tests don't need to worry about
      DI initialization timing.
"""

import duecal.core.container  # noqa: F401 - Trigger dependency registration
