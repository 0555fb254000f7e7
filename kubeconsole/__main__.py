"""Allow ``python -m kubeconsole``."""

from kubeconsole.main import cli

if __name__ == "__main__":
    cli()
