# storage.py
import os
import json
import logging
from datetime import datetime, date
from typing import List, Dict

from sqlalchemy import (
    create_engine, MetaData, Table, Column,
    Integer, String, Date, DateTime, Text
)
from sqlalchemy.sql import select, insert, delete
from sqlalchemy.pool import NullPool

from config import STORAGE
from panel import BloodTestRecord, make_panel, panel_to_json
from blood_rules import AnalysisResult

logger = logging.getLogger(__name__)

def _get_db_url() -> str:
    return os.getenv("DATABASE_URL", "").strip()

_engine = None

def get_engine():
    global _engine
    if _engine is None:
        db_url = _get_db_url()
        if db_url:
            _engine = create_engine(db_url, pool_pre_ping=True, poolclass=NullPool)
        else:
            path = os.getenv("BLOOD_TRACKER_SQLITE_PATH", STORAGE["sqlite_path"])
            _engine = create_engine(f"sqlite:///{path}", connect_args={"check_same_thread": False})
    return _engine

metadata = MetaData()

blood_tests = Table(
    "blood_tests", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_key", String(80), nullable=False, index=True),
    Column("test_date", Date, nullable=False),
    Column("values_json", Text, nullable=False),
    Column("analysis_json", Text, nullable=False),
    Column("recommendation", Text, nullable=False),
    Column("risk_tier", String(20), nullable=False),
    Column("risk_score", Integer, nullable=False),
    Column("created_at", DateTime, nullable=False),
)

def init_db() -> None:
    metadata.create_all(get_engine())

def add_blood_test(user_key: str, record: BloodTestRecord, result: AnalysisResult) -> int:
    with get_engine().begin() as conn:
        res = conn.execute(insert(blood_tests).values(
            user_key=user_key,
            test_date=date.fromisoformat(record.date),
            values_json=json.dumps(panel_to_json(record.panel)),
            analysis_json=json.dumps(list(result.lines), ensure_ascii=False),
            recommendation=result.recommendation,
            risk_tier=result.risk_tier,
            risk_score=result.risk_score,
            created_at=datetime.now(),
        ))
        test_id = int(res.inserted_primary_key[0])
    logger.info("Stored blood test %d for %s (%s, tier %s)", test_id, user_key, record.date, result.risk_tier)
    return test_id

def fetch_blood_tests(user_key: str) -> List[Dict]:
    """Stored tests for a user, newest test date first."""
    with get_engine().begin() as conn:
        rows = conn.execute(
            select(blood_tests)
            .where(blood_tests.c.user_key == user_key)
            .order_by(blood_tests.c.test_date.desc(), blood_tests.c.id.desc())
        ).fetchall()

    tests = []
    for r in rows:
        d = dict(r._mapping)
        tests.append({
            "id": d["id"],
            "test_date": d["test_date"].isoformat(),
            "values": make_panel(json.loads(d["values_json"] or "{}")),
            "analysis": json.loads(d["analysis_json"] or "[]"),
            "recommendation": d["recommendation"],
            "risk_tier": d["risk_tier"],
            "risk_score": int(d["risk_score"]),
            "created_at": d["created_at"].isoformat(),
        })
    return tests

def delete_blood_tests(user_key: str) -> int:
    with get_engine().begin() as conn:
        res = conn.execute(delete(blood_tests).where(blood_tests.c.user_key == user_key))
    logger.info("Deleted %d blood tests for %s", res.rowcount, user_key)
    return int(res.rowcount)
