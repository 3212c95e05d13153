import json
from pathlib import Path
from typing import List, Optional, Tuple

import httpx
import typer

from roadrisk.domain.models import IncidentSegment
from roadrisk.domain.registry import build_hotspots
from roadrisk.domain.scoring import build_heat_points
from roadrisk.presenters.banner import Banner, BannerPresenter
from roadrisk.providers.segments.api import ApiSegmentsProvider
from roadrisk.providers.segments.base import SegmentQuery, SegmentsProvider
from roadrisk.providers.segments.static import JsonFileSegmentsProvider
from roadrisk.services.alert_session import AlertSession

app = typer.Typer(help="CLI para hotspots de colisiones con fauna")

_EXAMPLE_DATA = Path(__file__).parent / "sample_segments.json"
_EXAMPLE_ROUTE = Path(__file__).parent / "sample_route.json"


def _build_provider(file: Optional[Path], api: Optional[str]) -> SegmentsProvider:
    if api:
        return ApiSegmentsProvider(base_url=api)
    return JsonFileSegmentsProvider(file or _EXAMPLE_DATA)


def _fetch_segments(file: Optional[Path], api: Optional[str], query: SegmentQuery) -> List[IncidentSegment]:
    try:
        return _build_provider(file, api).fetch_segments(query)
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--api" if api else "--file")
    except httpx.HTTPError as exc:
        typer.echo(f"No se pudieron cargar segmentos: {exc}", err=True)
        raise typer.Exit(code=1)


def _load_route(path: Path) -> List[Tuple[float, float]]:
    if not path.exists():
        raise typer.BadParameter(f"Route file not found: {path}")
    payload = json.loads(path.read_text(encoding="utf-8"))
    route = []
    for item in payload:
        if isinstance(item, dict):
            route.append((float(item["lat"]), float(item["lon"])))
        else:
            lat, lon = item
            route.append((float(lat), float(lon)))
    return route


@app.command("hotspots")
def cli_hotspots(
    file: Optional[Path] = typer.Option(None, help="Fichero JSON de segmentos"),
    api: Optional[str] = typer.Option(None, help="URL base de la API de hotspots"),
    road_name: Optional[str] = typer.Option(None, help="Filtrar por carretera"),
    time_of_day: Optional[str] = typer.Option(None, help="Franja horaria"),
    species: Optional[str] = typer.Option(None, help="Especie"),
):
    query = SegmentQuery(road_name=road_name, time_of_day=time_of_day, species=species)
    segments = _fetch_segments(file, api, query)
    hotspots = build_hotspots(segments)
    if not hotspots:
        typer.echo("No se encontraron hotspots")
        raise typer.Exit(code=0)
    typer.echo("lat\tlon\tradius_m\talert\tfill\troad")
    for hs in hotspots:
        typer.echo(
            f"{hs.lat:.5f}\t{hs.lon:.5f}\t{hs.radius_m:.1f}\t{hs.alert_tier}\t{hs.fill_tier}\t{hs.road_name}"
        )


@app.command("heatmap")
def cli_heatmap(
    file: Optional[Path] = typer.Option(None, help="Fichero JSON de segmentos"),
    api: Optional[str] = typer.Option(None, help="URL base de la API de hotspots"),
    road_name: Optional[str] = typer.Option(None, help="Filtrar por carretera"),
    time_of_day: Optional[str] = typer.Option(None, help="Franja horaria"),
    species: Optional[str] = typer.Option(None, help="Especie"),
):
    query = SegmentQuery(road_name=road_name, time_of_day=time_of_day, species=species)
    points = build_heat_points(_fetch_segments(file, api, query))
    typer.echo("lat\tlon\tweight")
    for point in points:
        typer.echo(f"{point.lat:.5f}\t{point.lon:.5f}\t{point.weight}")


@app.command("simulate")
def cli_simulate(
    route: Optional[Path] = typer.Option(None, help="Fichero JSON con posiciones [lat, lon]"),
    file: Optional[Path] = typer.Option(None, help="Fichero JSON de segmentos"),
    api: Optional[str] = typer.Option(None, help="URL base de la API de hotspots"),
    road_name: Optional[str] = typer.Option(None, help="Filtrar por carretera"),
    time_of_day: Optional[str] = typer.Option(None, help="Franja horaria"),
    species: Optional[str] = typer.Option(None, help="Especie"),
    interval: float = typer.Option(2.0, min=0.0, help="Segundos simulados entre posiciones"),
    display_seconds: Optional[float] = typer.Option(None, min=0.0, help="Duración del banner"),
):
    positions = _load_route(route or _EXAMPLE_ROUTE)
    clock = {"now": 0.0}

    def on_hide(banner: Banner) -> None:
        typer.echo(f"{clock['now']:.1f}\tbanner hidden\t{banner.message}")

    presenter = BannerPresenter(display_seconds=display_seconds, clock=lambda: clock["now"], on_hide=on_hide)
    session = AlertSession(
        _build_provider(file, api),
        presenter=presenter,
        query=SegmentQuery(road_name=road_name, time_of_day=time_of_day, species=species),
    )
    stats = session.reload()
    if not stats["ok"]:
        typer.echo(f"No se pudieron cargar segmentos: {stats['error']}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"zones={stats['loaded']} positions={len(positions)}")

    alerts = 0
    for step, (lat, lon) in enumerate(positions):
        clock["now"] = step * interval
        presenter.current()
        for event in session.update_position(lat, lon):
            alerts += 1
            typer.echo(f"{clock['now']:.1f}\tALERT {event.level}\t{event.message}")
    typer.echo(f"alerts={alerts}")


if __name__ == "__main__":
    app()
