"""Allow ``python -m photogrid``."""

from .main import main

main()
