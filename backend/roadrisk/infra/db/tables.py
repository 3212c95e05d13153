from __future__ import annotations

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, MetaData, Table, Text

metadata = MetaData()

segments_table = Table(
    "segments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("external_id", Text, nullable=False, unique=True),
    Column("road_name", Text, nullable=False),
    Column("start_lat", Float, nullable=False),
    Column("start_lon", Float, nullable=False),
    Column("danger_category", Text, nullable=False),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

incidents_table = Table(
    "incidents",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("external_id", Text, nullable=False, unique=True),
    Column("segment_id", Integer, ForeignKey("segments.id"), nullable=False),
    Column("species", Text),
    Column("time_of_day", Text),
    # killed | injured | uninjured
    Column("outcome", Text, nullable=False),
    Column("occurred_at", DateTime(timezone=True)),
    Column("created_at", DateTime(timezone=True)),
)
