import typer

from trialguard.errors import TrialGuardError
from trialguard.gate import FileLastCheckStore, GateState, RevocationGate
from trialguard.pipeline import GrantVerifier

from trial_cli.core import config
from trial_cli.core.api import api_check_revocation, api_get_public_key, api_issue_trial, api_set_revoked
from trial_cli.core.artifacts import last_check_path, load_grant, load_public_key, save_grant


app = typer.Typer(help="Trial license commands")


def build_verifier() -> GrantVerifier:
    """
    Wires the pipeline from the local configuration.
    """
    gate = RevocationGate(
        checker=api_check_revocation,
        store=FileLastCheckStore(last_check_path()),
        grace_hours=config.grace_period_hours(),
        timeout=config.check_timeout(),
    )
    return GrantVerifier(load_public_key(), gate)


@app.command("get-license")
def get_license(user_id: str = typer.Argument("demo-user", help="User to request a trial for")):
    """
    Request a trial grant from the license server and store it locally.
    """
    typer.echo(f"Requesting license for: {user_id}")

    grant = api_issue_trial(user_id)
    if grant is None:
        typer.echo("Error: could not obtain a license from the server.", err=True)
        raise typer.Exit(code=1)

    token_text, signature_hex = grant
    save_grant(token_text, signature_hex)
    typer.echo("License files created successfully!")
    typer.echo(f"   {config.APP_DIR / config.TOKEN_FILENAME}")
    typer.echo(f"   {config.APP_DIR / config.SIGNATURE_FILENAME}")


@app.command("run")
def run():
    """
    Verify the stored grant and run the licensed application.
    """
    try:
        token_text, signature_hex = load_grant()
        status = build_verifier().verify(token_text, signature_hex)
    except TrialGuardError as e:
        typer.echo(f"ERROR [{e.code}]: {e.message}", err=True)
        raise typer.Exit(code=1)

    typer.echo("LICENSE VALID")
    typer.echo(f"   User: {status.token.subject_id}")
    typer.echo(f"   Days remaining: {status.days_remaining}")
    if status.gate.state == GateState.GRACE_PERIOD_ACTIVE:
        typer.echo(f"   Using offline grace period ({status.gate.hours_remaining} hours remaining)")
    else:
        typer.echo("   License verified online")

    typer.echo(f"\nHello, {status.token.subject_id}! Your trial is running.")


@app.command("public-key")
def public_key():
    """
    Print the server's public key so it can be provisioned into consumers.
    """
    key = api_get_public_key()
    if key is None:
        typer.echo("Error: could not fetch the public key.", err=True)
        raise typer.Exit(code=1)
    typer.echo(key)
    typer.echo(
        "Check this value against the server operator's published key before "
        "setting TRIALGUARD_PUBLIC_KEY.",
        err=True,
    )


@app.command("revoke")
def revoke(
    user_id: str,
    admin_key: str = typer.Option(None, "--admin-key", envvar="TRIALGUARD_ADMIN_KEY", help="Server admin key"),
):
    """
    Revoke a user's trial (admin).
    """
    if not api_set_revoked(user_id, True, admin_key):
        typer.echo("Revocation failed (check admin key and server).", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Trial revoked for {user_id}.")


@app.command("unrevoke")
def unrevoke(
    user_id: str,
    admin_key: str = typer.Option(None, "--admin-key", envvar="TRIALGUARD_ADMIN_KEY", help="Server admin key"),
):
    """
    Restore a previously revoked trial (admin).
    """
    if not api_set_revoked(user_id, False, admin_key):
        typer.echo("Restore failed (check admin key and server).", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Trial restored for {user_id}.")
