"""CLI package for display-env-wrapper."""

from display_env_wrapper.cli import probe_cmd, wrapper_cmd

app = wrapper_cmd.app
probe_app = probe_cmd.app


def main():
    """Entry point of ``display-env-wrapper``."""
    app()


def probe_main():
    """Entry point of ``display-env-wrapper-probe``."""
    probe_app()


if __name__ == "__main__":
    main()
