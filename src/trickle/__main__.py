"""Allow ``python -m trickle``."""

from trickle.main import main

main()
