"""Module entrypoint for ``python -m smarttree``.

This keeps module-mode execution behavior identical to the CLI script.
All argument parsing and output happen in ``smarttree.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
