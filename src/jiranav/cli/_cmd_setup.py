"""OAuth setup wizard for jiranav CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from jiranav.client import JiraClient
from jiranav.config import get_config_path, load_config, save_config
from jiranav.constants import DEFAULT_JQL, DEFAULT_SCOPES
from jiranav.errors import JiranavError
from jiranav.models import JiraConfig, MenuOption, ViewMode
from jiranav.oauth import (
    authorize_in_browser,
    exchange_code_for_tokens,
    fetch_accessible_resources,
)
from jiranav.prompts import ConsolePrompter

from ._json_state import echo_error

if TYPE_CHECKING:
    from jiranav.oauth import AccessibleResource
    from jiranav.prompts import Prompter


def select_resource(
    prompter: Prompter,
    resources: list[AccessibleResource],
) -> AccessibleResource | None:
    """Pick the Jira site to use; a single site is chosen without asking."""
    if len(resources) == 1:
        return resources[0]
    options = [MenuOption(f"{r.name} ({r.url})", r) for r in resources]
    return prompter.select("Select a Jira site", options)


def _prompt_client_id(prompter: Prompter, existing: JiraConfig | None) -> str:
    client_id = existing.client_id if existing else ""
    if client_id:
        if not prompter.confirm("Reuse the stored client ID?", default=True):
            client_id = prompter.text("Atlassian OAuth client ID", default=client_id)
    else:
        client_id = prompter.text("Atlassian OAuth client ID")
    return client_id.strip()


def _prompt_client_secret(prompter: Prompter, existing: JiraConfig | None) -> str:
    client_secret = existing.client_secret if existing else ""
    if not client_secret:
        client_secret = prompter.secret("Atlassian OAuth client secret")
    elif prompter.confirm("Update the stored client secret?", default=False):
        client_secret = prompter.secret("New Atlassian OAuth client secret")
    return client_secret.strip()


def run_setup(prompter: Prompter | None = None) -> None:
    """Authorize against Atlassian and store credentials plus preferences.

    Raises:
        typer.Exit: With status 1 on missing input or a failed OAuth step.
    """
    prompter = prompter or ConsolePrompter()
    existing = load_config()

    client_id = _prompt_client_id(prompter, existing)
    client_secret = _prompt_client_secret(prompter, existing)
    if not client_id:
        echo_error("Client ID cannot be empty.")
        raise typer.Exit(1)
    if not client_secret:
        echo_error("Client secret cannot be empty.")
        raise typer.Exit(1)

    default_jql = prompter.text(
        f"Default JQL (press Enter for {DEFAULT_JQL})",
        default=(existing.default_jql if existing else None) or DEFAULT_JQL,
    )

    try:
        code = authorize_in_browser(client_id, DEFAULT_SCOPES, echo=prompter.notify)
        tokens = exchange_code_for_tokens(client_id, client_secret, code)
        resources = fetch_accessible_resources(tokens.access_token)
        if not resources:
            echo_error("No accessible Jira resources were returned for this account.")
            raise typer.Exit(1)

        resource = select_resource(prompter, resources)
        if resource is None:
            echo_error("No Jira site selected.")
            raise typer.Exit(1)

        config = JiraConfig(
            client_id=client_id,
            client_secret=client_secret,
            cloud_id=resource.id,
            cloud_name=resource.name,
            cloud_url=resource.url,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_at=tokens.expires_at,
            default_jql=default_jql.strip() or DEFAULT_JQL,
            last_used_prefix=existing.last_used_prefix if existing else None,
            issue_view_mode=(
                existing.issue_view_mode if existing else None
            ) or ViewMode.ASSIGNED,
        )

        client = JiraClient(config.cloud_id, lambda: config.access_token)
        user = client.get_current_user()
        prompter.notify(
            f"Successfully authenticated as {user.get('displayName', 'unknown')}",
        )

        save_config(config)
        prompter.notify(f"Saved configuration to {get_config_path()}")
    except JiranavError as e:
        echo_error("Failed to complete OAuth setup.", str(e))
        raise typer.Exit(1) from e


def register(app: typer.Typer) -> None:
    """Register the setup command."""

    @app.command("setup")
    def setup() -> None:
        """Run the initial Jira CLI setup wizard."""
        run_setup()
