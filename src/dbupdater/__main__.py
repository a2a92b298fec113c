from dbupdater.cli.app import app

app()
