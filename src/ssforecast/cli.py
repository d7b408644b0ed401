"""src/ssforecast/cli.py"""

from __future__ import annotations

import typer
from rich import print

from ssforecast.common.config import load_config
from ssforecast.common.logging import setup_logging
from ssforecast.pipelines.run_fit import run_fit
from ssforecast.pipelines.run_forecast import run_forecast

app = typer.Typer(help="Single-source-of-error state-space forecasting CLI")

DEFAULT_CONFIG = "configs/config.yaml"


@app.command()
def init(config_path: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML config")) -> None:
    """Create expected directories from config (data/, artifacts/, etc.)."""
    cfg = load_config(config_path)
    setup_logging(cfg)

    created = cfg.ensure_directories()
    print("[bold green]Init complete.[/bold green]")
    if created:
        print("Created directories:")
        for p in created:
            print(f"  - {p}")
    else:
        print("No directories needed (already exist).")


@app.command()
def fit(config_path: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML config")) -> None:
    """Estimate the configured model; persist payload and fitted values."""
    cfg = load_config(config_path)
    setup_logging(cfg)
    cfg.ensure_directories()
    out = run_fit(cfg)
    print(f"[bold green]Fit complete.[/bold green] Model saved to {out}")


@app.command()
def forecast(config_path: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML config")) -> None:
    """Forecast from the saved model, with prediction intervals."""
    cfg = load_config(config_path)
    setup_logging(cfg)
    cfg.ensure_directories()
    out = run_forecast(cfg)
    print(f"[bold green]Forecasting complete.[/bold green] Written to {out}")


@app.command()
def run_all(config_path: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML config")) -> None:
    """Convenience command: init → fit → forecast"""
    cfg = load_config(config_path)
    setup_logging(cfg)
    cfg.ensure_directories()
    run_fit(cfg)
    run_forecast(cfg)
    print("[bold green]All steps complete.[/bold green]")


if __name__ == "__main__":
    app()
