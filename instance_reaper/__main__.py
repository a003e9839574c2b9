"""Allow ``python -m instance_reaper``."""

from instance_reaper.main import main

main()
