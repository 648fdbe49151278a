from crdlint.cli.main import app

app()
