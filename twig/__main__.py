"""Run twig with ``python -m twig``."""

from .cli import main


if __name__ == "__main__":
    main()
