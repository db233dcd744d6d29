# index_scout/__main__.py
from index_scout.cli import cli

if __name__ == "__main__":
    cli(prog_name="index-scout")
