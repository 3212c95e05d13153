from __future__ import annotations

import csv
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from sqlalchemy import create_engine

from roadrisk.infra.db.segments_repository import SegmentsRepository
from roadrisk.infra.db.tables import metadata

DEFAULT_DATA_DIR = Path(os.getenv("IMPORT_DATA_DIR", "/data"))


def import_segments_from_csv(
    data_dir: str | Path | None = None,
    *,
    engine=None,
    database_url: Optional[str] = None,
) -> Dict[str, int]:
    base_path = _resolve_data_dir(data_dir)
    segments_path = base_path / "segments_seed.csv"
    incidents_path = base_path / "incidents_seed.csv"

    if engine is None:
        if database_url is None:
            database_url = os.getenv("DATABASE_URL")
        if not database_url:
            raise RuntimeError("DATABASE_URL required if engine not provided")
        engine = create_engine(database_url, future=True)
    metadata.create_all(engine)
    repo = SegmentsRepository(engine)

    segment_ids, segments_count = _import_segments(segments_path, repo)
    incidents_count, skipped = _import_incidents(incidents_path, repo, segment_ids)
    db_url = getattr(engine, "url", database_url or os.getenv("DATABASE_URL"))
    print(
        f"[import_csv] Import complete database={db_url} "
        f"segments={segments_count} incidents={incidents_count} skipped={skipped}"
    )
    return {"segments": segments_count, "incidents": incidents_count, "skipped": skipped}


def _resolve_data_dir(data_dir: str | Path | None) -> Path:
    if data_dir is None:
        candidate = DEFAULT_DATA_DIR
    else:
        candidate = Path(data_dir)
    if not candidate.is_absolute():
        candidate = (Path.cwd() / candidate).resolve()
    if not candidate.exists():
        raise FileNotFoundError(f"Data directory not found: {candidate}")
    return candidate


def _import_segments(path: Path, repo: SegmentsRepository) -> tuple[Dict[str, int], int]:
    ids: Dict[str, int] = {}
    count = 0
    for row in _read_csv(path):
        payload = {
            "external_id": row["external_id"],
            "road_name": row["road_name"],
            "start_lat": float(row["start_lat"]),
            "start_lon": float(row["start_lon"]),
            "danger_category": row.get("danger_category") or "High",
        }
        ids[payload["external_id"]] = repo.upsert_segment(payload)
        count += 1
    return ids, count


def _import_incidents(path: Path, repo: SegmentsRepository, segment_ids: Dict[str, int]) -> tuple[int, int]:
    count = 0
    skipped = 0
    for row in _read_csv(path):
        external_id = row["external_id"]
        segment_key = row["segment_external_id"]
        segment_id = segment_ids.get(segment_key) or repo.get_segment_id_by_external(segment_key)
        if segment_id is None:
            print(f"[import_csv] WARNING: skipping incident {external_id}: unknown segment {segment_key}")
            skipped += 1
            continue
        try:
            occurred_at = _parse_dt(row["occurred_at"]) if row.get("occurred_at") else None
            repo.upsert_incident(
                {
                    "external_id": external_id,
                    "segment_id": segment_id,
                    "species": (row.get("species") or "").lower() or None,
                    "time_of_day": (row.get("time_of_day") or "").lower() or None,
                    "outcome": row.get("outcome"),
                    "occurred_at": occurred_at,
                }
            )
        except (ValueError, TypeError) as exc:
            print(f"[import_csv] WARNING: skipping incident {external_id}: {exc}")
            skipped += 1
            continue
        count += 1
    return count, skipped


def _read_csv(path: Path):
    with path.open(newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        for row in reader:
            yield {k: (v.strip() if isinstance(v, str) else v) for k, v in row.items()}


def _parse_dt(value: str) -> datetime:
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


if __name__ == "__main__":
    import sys
    data_arg = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    import_segments_from_csv(data_arg)
