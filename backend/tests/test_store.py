import uuid
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from trackfeel.core.errors import StoreError
from trackfeel.models.activity import Activity
from trackfeel.services.gpx_reader import RawPoint
from trackfeel.services.kinematics import compute_kinematics
from trackfeel.services.store import ActivityStore, trackpoint_rows


def _result():
    return compute_kinematics([
        RawPoint(10.0, 20.0, ele=5.0, hr=120, time_text="2020-01-02T15:04:05Z"),
        RawPoint(30.0, 40.0, time_text="2020-01-02T15:04:15Z"),
        RawPoint(15.0, 25.0, hr=130, time_text="2020-01-02T15:04:25Z"),
    ])


def test_trackpoint_rows():
    activity_id = uuid.uuid4()
    rows = trackpoint_rows(activity_id, _result().points)

    assert len(rows) == 3
    assert {r["activity_id"] for r in rows} == {activity_id}
    assert rows[0]["geom"].data == "POINT(20.0 10.0)"
    assert rows[0]["geom"].srid == 4326
    assert rows[0]["speed_mps"] is None
    assert rows[1]["speed_mps"] is not None
    assert [r["hr"] for r in rows] == [120, None, 130]
    assert [r["ele_m"] for r in rows] == [5.0, None, None]


def test_save_writes_summary_and_points_in_one_batch():
    db = MagicMock()
    result = _result()

    activity_id = ActivityStore(db).save(result)

    assert isinstance(activity_id, uuid.UUID)
    (activity,), _ = db.add.call_args
    assert isinstance(activity, Activity)
    assert activity.id == activity_id
    assert activity.duration_sec == 20
    assert activity.distance_m == int(result.summary.distance_m)
    assert activity.avg_hr == 125
    assert activity.max_hr == 130
    assert activity.bounds.data == (
        "POLYGON((20.000000 10.000000,40.000000 10.000000,"
        "40.000000 30.000000,20.000000 30.000000,20.000000 10.000000))"
    )

    assert db.execute.call_count == 1
    stmt, rows = db.execute.call_args.args
    assert len(rows) == 3
    db.commit.assert_called_once()
    db.rollback.assert_not_called()


def test_save_records_sport():
    db = MagicMock()

    ActivityStore(db).save(_result(), sport="running")

    (activity,), _ = db.add.call_args
    assert activity.sport == "running"


def test_save_without_sport_leaves_it_null():
    db = MagicMock()

    ActivityStore(db).save(_result())

    (activity,), _ = db.add.call_args
    assert activity.sport is None


def test_failed_point_batch_rolls_back_everything():
    db = MagicMock()
    db.execute.side_effect = OperationalError("INSERT INTO trackpoints", {}, Exception("connection lost"))

    with pytest.raises(StoreError):
        ActivityStore(db).save(_result())

    db.rollback.assert_called_once()
    db.commit.assert_not_called()


def test_failed_summary_insert_rolls_back():
    db = MagicMock()
    db.flush.side_effect = IntegrityError("INSERT INTO activities", {}, Exception("duplicate key"))

    with pytest.raises(StoreError):
        ActivityStore(db).save(_result())

    db.execute.assert_not_called()
    db.rollback.assert_called_once()
    db.commit.assert_not_called()


def test_failed_commit_rolls_back():
    db = MagicMock()
    db.commit.side_effect = OperationalError("COMMIT", {}, Exception("canceling statement due to statement timeout"))

    with pytest.raises(StoreError):
        ActivityStore(db).save(_result())

    db.rollback.assert_called_once()


def test_statement_deadline_applied_on_postgres():
    db = MagicMock()
    db.get_bind.return_value.dialect.name = "postgresql"

    ActivityStore(db, timeout_ms=5000).save(_result())

    first_stmt = db.execute.call_args_list[0].args[0]
    assert str(first_stmt) == "SET LOCAL statement_timeout = 5000"
    assert db.execute.call_count == 2


def test_no_deadline_when_disabled_or_not_postgres():
    db = MagicMock()
    db.get_bind.return_value.dialect.name = "postgresql"
    ActivityStore(db, timeout_ms=0).save(_result())
    assert db.execute.call_count == 1

    db = MagicMock()
    db.get_bind.return_value.dialect.name = "sqlite"
    ActivityStore(db, timeout_ms=5000).save(_result())
    assert db.execute.call_count == 1


def test_read_failure_is_store_error():
    db = MagicMock()
    db.query.side_effect = OperationalError("SELECT", {}, Exception("server closed the connection"))
    store = ActivityStore(db)

    with pytest.raises(StoreError):
        store.get_activity(uuid.uuid4())
    with pytest.raises(StoreError):
        store.get_points(uuid.uuid4())
    with pytest.raises(StoreError):
        store.list_activities(20, 0)
    assert db.rollback.call_count == 3


def test_unknown_activity_is_none():
    db = MagicMock()
    db.query.return_value.filter.return_value.first.return_value = None

    assert ActivityStore(db).get_activity(uuid.uuid4()) is None
