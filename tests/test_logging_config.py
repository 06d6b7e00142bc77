import datetime
import logging

from chatrelay.logging_config import DailyFileHandler, LocalTimezoneFormatter


def test_daily_file_handler_writes_dated_file_and_prunes_old_ones(tmp_path):
    for day in ("2020-01-01", "2020-01-02", "2020-01-03"):
        (tmp_path / f"app-{day}.log").write_text("old\n", encoding="utf-8")

    handler = DailyFileHandler(log_dir=tmp_path, filename_prefix="app", backup_count=2)
    handler.setFormatter(logging.Formatter("%(name)s %(message)s"))
    try:
        handler.emit(
            logging.LogRecord("chatrelay", logging.INFO, __file__, 1, "Accepted seq=%d", (3,), None)
        )
    finally:
        handler.close()

    today = tmp_path / f"app-{datetime.date.today().isoformat()}.log"
    assert today.read_text(encoding="utf-8") == "chatrelay Accepted seq=3\n"
    assert sorted(p.name for p in tmp_path.iterdir()) == sorted(
        ["app-2020-01-03.log", today.name]
    )


def test_formatter_uses_configured_timezone():
    formatter = LocalTimezoneFormatter("%(asctime)s", timezone_name="UTC")
    record = logging.LogRecord("chatrelay", logging.INFO, __file__, 1, "x", (), None)
    record.created = 0.0

    assert formatter.formatTime(record) == "1970-01-01T00:00:00.000+00:00"


def test_formatter_falls_back_on_unknown_timezone():
    formatter = LocalTimezoneFormatter("%(asctime)s", timezone_name="Not/AZone")
    record = logging.LogRecord("chatrelay", logging.INFO, __file__, 1, "x", (), None)

    assert formatter.formatTime(record, "%Y") == datetime.datetime.now().strftime("%Y")
