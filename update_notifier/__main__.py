from __future__ import annotations

from update_notifier.entrypoint import main

main()
