import datetime
import json

import pytest

from visit_bot.core.models import User, VisitStatus
from visit_bot.core.storage import JSONStorage
from visit_bot.data.store import IN_TOWN_NOTE, VisitStore


def make_store(tmp_path, variant="visits"):
    return VisitStore(JSONStorage(tmp_path / "data"), variant=variant)


def test_register_alex_and_toggle_in_town(tmp_path):
    store = make_store(tmp_path)
    alex = store.register(User(name="Alex Rivera", organizations=["Corps A"]))

    assert [u.name for u in store.users] == ["Alex Rivera"]
    assert store.users[0].organizations == ["Corps A"]
    assert store.current_user == alex

    visit = store.mark_in_town(alex)
    assert visit.user_id == alex.id
    assert visit.status is VisitStatus.CURRENT
    assert visit.notes == IN_TOWN_NOTE
    assert len(store.visits) == 1

    again = store.mark_in_town(alex)
    assert again.id == visit.id
    assert len(store.visits) == 1
    assert store.visits[0].status is VisitStatus.PLANNED
    assert store.current_visit_for_user(alex.id) is None


def test_register_survives_reload(tmp_path):
    store = make_store(tmp_path)
    user = User(name=" Sam ", organizations=["A", "B", "A"], bio="Hiker")
    store.register(user)

    reloaded = make_store(tmp_path)
    assert len(reloaded.users) == 1
    loaded = reloaded.users[0]
    assert loaded.name == "Sam"
    assert loaded.organizations == ["A", "B"]
    assert loaded.bio == "Hiker"
    assert loaded.joined_at == user.joined_at
    assert reloaded.current_user == loaded


def test_register_with_current_user_updates_by_id(tmp_path):
    store = make_store(tmp_path)
    user = store.register(User(name="Alex"))
    store.register(User(name="Someone Else"))  # replaces nothing, appended as update
    assert len(store.users) == 2

    store.sign_in(user.id)
    renamed = user.model_copy(update={"name": "Alexandra"})
    store.register(renamed)
    assert [u.name for u in store.users] == ["Alexandra", "Someone Else"]
    assert store.current_user.name == "Alexandra"


def test_clear_session_keeps_user(tmp_path):
    store = make_store(tmp_path)
    store.register(User(name="Alex"))
    store.logout()

    assert store.current_user is None
    assert len(store.users) == 1
    assert not store.storage.path_for("current_user").exists()
    assert make_store(tmp_path).current_user is None


def test_leave_directory_removes_user(tmp_path):
    store = make_store(tmp_path, variant="directory")
    store.register(User(name="Alex", city="Lisbon"))
    left = store.logout()

    assert left.name == "Alex"
    assert store.users == []
    assert store.current_user is None
    assert make_store(tmp_path, variant="directory").users == []


def test_leave_directory_without_session_is_noop(tmp_path):
    store = make_store(tmp_path, variant="directory")
    assert store.leave_directory() is None


def test_unknown_variant_rejected(tmp_path):
    with pytest.raises(ValueError):
        make_store(tmp_path, variant="other")


def test_session_for_discord(tmp_path):
    store = make_store(tmp_path)
    bob = store.register(User(name="Bob", discord_id=10))
    store.register(User(name="Eve", discord_id=20))

    assert store.session_for_discord(10) == bob
    assert store.current_user == bob
    assert store.session_for_discord(99) is None
    assert store.current_user is None


def test_update_visit_status_results(tmp_path):
    store = make_store(tmp_path)
    user = store.register(User(name="Alex"))
    visit = store.mark_in_town(user)

    assert store.update_visit_status("missing", "planned") == "Visit not found."
    assert store.update_visit_status(visit.id, "gone") == "Invalid status."
    assert store.update_visit_status(visit.id, "planned") is None
    assert store.get_visit(visit.id).status is VisitStatus.PLANNED
    assert make_store(tmp_path).visits[0].status is VisitStatus.PLANNED


def test_add_visit_does_not_dedupe(tmp_path):
    store = make_store(tmp_path)
    user = store.register(User(name="Alex"))
    data = {
        "user_id": user.id,
        "user_name": user.name,
        "start_date": datetime.datetime.now(tz=datetime.UTC),
        "status": "current",
    }
    first = store.add_visit(data)
    second = store.add_visit(data)
    assert first.id != second.id
    assert len(store.visits_for_user(user.id)) == 2


def test_visit_end_date_roundtrip(tmp_path):
    store = make_store(tmp_path)
    user = store.register(User(name="Alex"))
    start = datetime.datetime(2025, 6, 1, tzinfo=datetime.UTC)
    end = datetime.datetime(2025, 6, 8, tzinfo=datetime.UTC)
    with_end = store.plan_visit(user, start, end, notes="Week off")
    without_end = store.plan_visit(user, start, notes="  ")

    raw = json.loads(store.storage.path_for("visits").read_text(encoding="utf-8"))
    assert "end_date" in raw[0]
    assert "end_date" not in raw[1]
    assert "notes" not in raw[1]

    reloaded = make_store(tmp_path)
    loaded_with = reloaded.get_visit(with_end.id)
    loaded_without = reloaded.get_visit(without_end.id)
    assert isinstance(loaded_with.end_date, datetime.datetime)
    assert loaded_with.end_date.date() == end.date()
    assert loaded_without.end_date is None
    assert "end_date" not in loaded_without.model_fields_set


def test_suggestions_for_visit_in_order(tmp_path):
    store = make_store(tmp_path)
    alex = store.register(User(name="Alex"))
    visit = store.mark_in_town(alex)
    other = store.plan_visit(alex, datetime.datetime(2025, 7, 1, tzinfo=datetime.UTC))

    def suggest(visit_id, title):
        return store.add_suggestion(
            {
                "user_id": alex.id,
                "user_name": alex.name,
                "visit_id": visit_id,
                "title": title,
                "description": "Let's go",
            }
        )

    first = suggest(visit.id, "Coffee")
    suggest(other.id, "Museum")
    second = suggest(visit.id, "Hike")

    found = store.suggestions_for_visit(visit.id)
    assert [s.id for s in found] == [first.id, second.id]
    assert first.created_at <= second.created_at

    reloaded = make_store(tmp_path)
    assert [s.title for s in reloaded.suggestions_for_visit(visit.id)] == ["Coffee", "Hike"]
    assert reloaded.suggestions[0].created_at == first.created_at


def test_add_suggestion_for_unknown_visit_is_accepted(tmp_path):
    store = make_store(tmp_path)
    alex = store.register(User(name="Alex"))
    suggestion = store.add_suggestion(
        {
            "user_id": alex.id,
            "user_name": alex.name,
            "visit_id": "nope",
            "title": "Dinner",
            "description": "Somewhere nice",
        }
    )
    assert store.suggestions_for_visit("nope") == [suggestion]


def test_active_visits_and_per_user_queries(tmp_path):
    store = make_store(tmp_path)
    alex = store.register(User(name="Alex"))
    store.clear_session()
    sam = store.register(User(name="Sam"))

    current = store.mark_in_town(alex)
    planned = store.plan_visit(sam, datetime.datetime(2025, 8, 1, tzinfo=datetime.UTC))

    assert store.active_visits() == [current, planned]
    assert store.visits_for_user(alex.id) == [current]
    assert store.current_visit_for_user(alex.id) == current
    assert store.current_visit_for_user(sam.id) is None
    assert store.planned_visits_for_user(sam.id) == [planned]


def test_display_name_follows_rename(tmp_path):
    store = make_store(tmp_path)
    alex = store.register(User(name="Alex"))
    visit = store.mark_in_town(alex)

    store.register(alex.model_copy(update={"name": "Alexandra"}))
    assert visit.user_name == "Alex"
    assert store.display_name(visit) == "Alexandra"

    store.leave_directory()
    assert store.display_name(visit) == "Alex"


def test_malformed_records_are_skipped(tmp_path):
    storage = JSONStorage(tmp_path / "data")
    storage.save("users", [{"id": "1", "name": "Ok"}, {"id": "2", "name": "   "}])
    storage.path_for("visits").write_text("garbage", encoding="utf-8")

    store = VisitStore(storage)
    assert [u.id for u in store.users] == ["1"]
    assert store.visits == []
