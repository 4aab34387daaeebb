# ./app/cli.py

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from app.schemas.treatment import (
    DEFAULT_KINETICS,
    DEFAULT_SYSTEM_PARAMS,
    DEFAULT_WATER_PARAMS,
    DefaultsOut,
    SimulationRequest,
    SweepRequest,
)
from app.services.advisory import get_expert_analysis
from app.services.simulation import TreatmentSimulator

app = typer.Typer(help="OzoNova ozone / peroxone treatment simulator")


def _load_request(json_path: Optional[Path]) -> SimulationRequest:
    if json_path is None:
        return SimulationRequest()
    with open(json_path, "r", encoding="utf-8") as f:
        return SimulationRequest.model_validate(json.load(f))


@app.command("simulate")
def simulate_cmd(
    json_path: Optional[Path] = typer.Argument(None, help="SimulationRequest JSON (생략 시 기본 시나리오)"),
    pretty: bool = True,
):
    out = TreatmentSimulator().run(_load_request(json_path))
    typer.echo(out.model_dump_json(indent=2 if pretty else None))


@app.command("sweep")
def sweep_cmd(
    parameter: str,
    start: float = typer.Option(...),
    stop: float = typer.Option(...),
    steps: int = typer.Option(5, min=2),
    json_path: Optional[Path] = typer.Option(None, "--input", help="기준 SimulationRequest JSON"),
    pretty: bool = True,
):
    base = _load_request(json_path)
    try:
        # ValidationError 도 ValueError 이므로 같은 exit code 로 처리
        req = SweepRequest.model_validate(
            {**base.model_dump(), "parameter": parameter, "start": start, "stop": stop, "steps": steps}
        )
        out = TreatmentSimulator().sweep(req, req.parameter, req.values or [])
    except ValueError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2)
    typer.echo(out.model_dump_json(indent=2 if pretty else None))


@app.command("defaults")
def defaults_cmd():
    out = DefaultsOut(
        system=DEFAULT_SYSTEM_PARAMS, water=DEFAULT_WATER_PARAMS, kinetics=DEFAULT_KINETICS
    )
    typer.echo(out.model_dump_json(indent=2))


@app.command("advise")
def advise_cmd(json_path: Optional[Path] = typer.Argument(None)):
    req = _load_request(json_path)
    result = TreatmentSimulator().simulate(req.system, req.water, req.kinetics)
    out = get_expert_analysis(req.system, req.water, result)
    typer.echo(out.model_dump_json(indent=2))


@app.command("serve")
def serve_cmd(host: str = "127.0.0.1", port: int = 8003, reload: bool = False):
    import uvicorn

    uvicorn.run("app.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
