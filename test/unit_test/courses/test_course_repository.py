"""
The lecture counter on `courses` is maintained by the same SQL statement that
inserts or deletes the lecture. These tests pin that statement shape.
"""

import re

import pytest

from core import db
from courses import repository

pytestmark = pytest.mark.asyncio


@pytest.fixture
def captured_sql(monkeypatch):
    calls = []

    async def fake_fetch_one(query, *args):
        calls.append((" ".join(query.split()), args))
        return {"id": 1}

    monkeypatch.setattr(db, "fetch_one", fake_fetch_one)
    return calls


async def test_add_lecture_bumps_counter_in_same_statement(captured_sql):
    await repository.add_lecture(
        7,
        title=" Intro ",
        description=" First lecture ",
        video_public_id="lectures/a.mp4",
        video_url="/media/lectures/a.mp4",
    )

    ((sql, args),) = captured_sql
    assert re.search(r"WITH course AS \( UPDATE courses SET number_of_lectures = number_of_lectures \+ 1", sql)
    assert "INSERT INTO lectures" in sql
    assert "FROM course RETURNING" in sql
    assert sql.index("number_of_lectures + 1") < sql.index("INSERT INTO lectures")
    assert args == (7, "Intro", "First lecture", "lectures/a.mp4", "/media/lectures/a.mp4")


async def test_delete_lecture_decrements_counter_in_same_statement(captured_sql):
    await repository.delete_lecture(7, 3)

    ((sql, args),) = captured_sql
    assert re.search(r"WITH removed AS \( DELETE FROM lectures WHERE course_id = \$1 AND id = \$2", sql)
    assert "SET number_of_lectures = GREATEST(number_of_lectures - 1, 0)" in sql
    assert "AND EXISTS (SELECT 1 FROM removed)" in sql
    assert sql.endswith("FROM removed")
    assert args == (7, 3)
