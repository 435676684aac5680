"""Entry point for the eb-deploy command line interface."""

import click

from ebdeploy import __version__
from ebdeploy.cli.commands.deploy import deploy


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, prog_name="eb-deploy")
def main() -> None:
    """Deploy applications to AWS Elastic Beanstalk."""


main.add_command(deploy)


if __name__ == "__main__":  # pragma: no cover
    main()
