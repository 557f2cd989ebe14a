import sys

from aimeAgent.main import cli

sys.exit(cli())
