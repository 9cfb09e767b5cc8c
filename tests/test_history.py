import json

import pytest

from wallpaper_runtime import history
from wallpaper_runtime.history import AppError, HistoryItem


@pytest.fixture
def data_home(tmp_path, monkeypatch):
    home = tmp_path / "data"
    monkeypatch.setenv("XDG_DATA_HOME", str(home))
    return home


def _item(wallpaper_id, title="Title"):
    return HistoryItem(
        wallpaper_id=wallpaper_id,
        title=title,
        preview=None,
        creator="Someone",
        applied_at="1700000000",
        local_path=f"/tmp/{wallpaper_id}",
    )


def test_history_path_lives_in_app_data_dir(data_home):
    assert history.history_path() == data_home / "wallpaper-engine-linux" / "history.json"
    assert history.history_path().parent == history.app_data_dir()


def test_missing_file_gives_empty_history(data_home):
    assert history.load_history() == []


def test_save_and_load_round_trip(data_home):
    items = [_item(1), _item(2, title=None)]
    history.save_history(items)
    assert history.load_history() == items
    stored = json.loads(history.history_path().read_text())
    assert stored == [item.to_dict() for item in items]


def test_record_puts_newest_first_and_deduplicates(data_home):
    history.record(_item(1))
    history.record(_item(2))
    history.record(_item(1, title="Again"))
    loaded = history.load_history()
    assert [entry.wallpaper_id for entry in loaded] == [1, 2]
    assert loaded[0].title == "Again"


def test_record_keeps_at_most_limit(data_home):
    for wallpaper_id in range(history.HISTORY_LIMIT + 5):
        history.record(_item(wallpaper_id))
    loaded = history.load_history()
    assert len(loaded) == history.HISTORY_LIMIT
    assert loaded[0].wallpaper_id == history.HISTORY_LIMIT + 4


def test_corrupt_file_raises_parse_error(data_home):
    path = history.history_path()
    path.parent.mkdir(parents=True)
    path.write_text("{not json")
    with pytest.raises(AppError, match="Failed to parse history"):
        history.load_history()


def test_entry_missing_required_field_is_parse_error(data_home):
    path = history.history_path()
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps([{"wallpaper_id": 5}]))
    with pytest.raises(AppError, match="Failed to parse history"):
        history.load_history()


def test_optional_fields_may_be_absent(data_home):
    path = history.history_path()
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps([{"wallpaper_id": 5, "applied_at": "1", "local_path": "/x"}]))
    loaded = history.load_history()
    assert loaded[0].title is None
    assert loaded[0].creator is None
    assert loaded[0].wallpaper_id == 5