"""Allow running ScopeGuard as ``python -m scopeguard``."""

from scopeguard import main

if __name__ == "__main__":
    main()
