from worklane.cli.app import app

app()
