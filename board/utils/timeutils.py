import datetime as dt


def utcnow() -> dt.datetime:
    # в БД храним наивное UTC-время
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)
