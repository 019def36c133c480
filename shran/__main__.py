"""Allow running shran with `python -m shran`."""

from shran.tool.shran import main

if __name__ == "__main__":
    main()
