# trial_cli/main.py


import typer
from trialguard.events import configure_logging
from trial_cli.license.commands import app as license_app

app = typer.Typer(help="TrialGuard trial consumer")
app.add_typer(license_app, name="license")


@app.callback()
def main(log_level: str = typer.Option("warning", "--log-level", help="Log level for decision events")):
    configure_logging("trial_cli", log_level, json_logs=False)


if __name__ == "__main__":
    app()
