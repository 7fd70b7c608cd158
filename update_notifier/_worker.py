from __future__ import annotations

import sys

from update_notifier.background_check import main

sys.exit(main())
