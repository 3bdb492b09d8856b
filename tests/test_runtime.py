import logging
from datetime import datetime, timedelta, timezone

from crm import runtime
from crm.config import AirtableSettings
from crm.runtime import gather, parse_timestamp, start_of_local_day


def test_start_of_local_day_converts_aware_times_to_local_first():
    # 23:30 at UTC-12 is already the next day almost everywhere else
    now = datetime(2024, 6, 15, 23, 30, tzinfo=timezone(timedelta(hours=-12)))
    local = now.astimezone()

    start = start_of_local_day(now)

    assert start == local.replace(hour=0, minute=0, second=0, microsecond=0)
    assert start.utcoffset() == local.utcoffset()
    assert start <= now < start + timedelta(days=1)


def test_start_of_local_day_reads_naive_as_local():
    start = start_of_local_day(datetime(2024, 6, 15, 14, 30))
    assert (start.year, start.month, start.day, start.hour) == (2024, 6, 15, 0)
    assert start.tzinfo is not None


def test_parse_timestamp():
    assert parse_timestamp("2024-06-14T10:00:00.000Z") == datetime(2024, 6, 14, 10, tzinfo=timezone.utc)
    assert parse_timestamp("") is None
    assert parse_timestamp("soon") is None


def test_gather_keeps_argument_order():
    assert gather(lambda: 1, lambda: 2, lambda: 3) == [1, 2, 3]


def test_core_env_summary_masks_token(monkeypatch, caplog):
    monkeypatch.setattr(runtime, "_CORE_ENV_LOGGED", False)
    cfg = AirtableSettings(base_id="appBASE", token="patSECRETTOKEN123")

    with caplog.at_level(logging.INFO, logger="env"):
        runtime.log_core_env(cfg)

    assert cfg.masked()["token"] == "patS...N123"
    assert "patS...N123" in caplog.text
    assert "patSECRETTOKEN123" not in caplog.text
    assert "configured=True" in caplog.text
