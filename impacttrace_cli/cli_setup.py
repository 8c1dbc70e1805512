"""LLM provider configuration commands."""

from __future__ import annotations

from typing import Optional

import typer

from . import config_manager

PROVIDERS = tuple(config_manager.DEFAULT_CONFIGS)
KEYLESS_PROVIDERS = {"ollama"}


def _mask(api_key: str) -> str:
    if len(api_key) <= 8:
        return "•" * len(api_key)
    return api_key[:8] + "•" * min(len(api_key) - 8, 16)


def set_llm(
    provider: str = typer.Argument(..., help=f"LLM provider: {', '.join(PROVIDERS)}."),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model name (provider default if omitted)."),
    api_key: Optional[str] = typer.Option(None, "--api-key", "-k", help="API key for cloud providers."),
    endpoint: Optional[str] = typer.Option(None, "--endpoint", "-e", help="Custom endpoint URL."),
):
    """Switch the LLM provider used for impact classification."""
    provider = provider.lower()
    if provider not in PROVIDERS:
        raise typer.BadParameter(f"Unknown provider '{provider}'. Choose one of: {', '.join(PROVIDERS)}")

    defaults = config_manager.get_provider_config(provider)
    model = model or defaults.get("model", "")
    endpoint = endpoint or defaults.get("endpoint", "")

    if provider not in KEYLESS_PROVIDERS and not api_key:
        env_vars = " or ".join(config_manager.api_key_env_vars(provider))
        typer.echo(typer.style(f"⚠ No API key given; {env_vars} will be used.", fg=typer.colors.YELLOW))

    if not config_manager.save_config(provider, model, api_key or "", endpoint):
        typer.echo(typer.style("✗ Could not write configuration.", fg=typer.colors.RED), err=True)
        raise typer.Exit(code=1)

    typer.echo(typer.style("✓ ", fg=typer.colors.GREEN) + f"LLM set to {provider} ({model})")


def unset_llm():
    """Clear the LLM configuration and return to defaults."""
    if not config_manager.CONFIG_FILE.exists():
        typer.echo("No configuration file to reset.")
        return
    if not config_manager.clear_config():
        typer.echo(typer.style("✗ Could not write configuration.", fg=typer.colors.RED), err=True)
        raise typer.Exit(code=1)
    typer.echo(typer.style("✓ ", fg=typer.colors.GREEN) + "LLM configuration cleared.")


def show_llm():
    """Show current LLM provider configuration."""
    settings = config_manager.resolve_llm_settings()

    typer.echo(f"  Provider  {typer.style(settings['provider'].upper(), bold=True)}")
    typer.echo(f"  Model     {typer.style(settings['model'], bold=True)}")
    if settings["endpoint"]:
        typer.echo(f"  Endpoint  {typer.style(settings['endpoint'], dim=True)}")
    if settings["api_key"]:
        typer.echo(f"  API Key   {_mask(settings['api_key'])}")
    else:
        typer.echo(f"  API Key   {typer.style('(not set)', dim=True)}")
    typer.echo(f"  Config    {typer.style(str(config_manager.CONFIG_FILE), dim=True)}")
