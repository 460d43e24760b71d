"""Allow ``python -m display_env_wrapper``."""

from display_env_wrapper.cli import main

if __name__ == "__main__":
    main()
