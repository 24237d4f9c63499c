from cwdatasource.cli.app import cli


def main():
    """Entry point for the cwds CLI. Delegates to cwdatasource.cli.app:cli."""
    cli()


if __name__ == "__main__":
    main()
