import pytest

from models.count import DailyCount
from models.user import Role
from services.catalog import RURAL_UNIT_ID, all_units
from services.errors import DuplicateUsername, RuralEditorExists, UnknownUnit


def _rows(store, unit_id, date):
    return (
        store.session.query(DailyCount)
        .filter(DailyCount.unit_id == unit_id, DailyCount.date == date)
        .all()
    )


def test_upsert_count_is_idempotent(store):
    store.upsert_count(1001, "2024-03-05", 5, 2)
    store.upsert_count(1001, "2024-03-05", 5, 2)
    store.session.commit()

    rows = _rows(store, 1001, "2024-03-05")
    assert len(rows) == 1
    assert (rows[0].manual, rows[0].electronic) == (5, 2)


def test_upsert_count_replaces_values(store):
    store.upsert_count(1001, "2024-03-05", 5, 2)
    store.upsert_count(1001, "2024-03-05", 1, 9)
    store.session.commit()

    assert store.get_counts_for_unit_month(1001, "2024-03") == {
        "2024-03-05": {"manual": 1, "electronic": 9}
    }


def test_month_reads_do_not_leak_adjacent_days(store):
    for d in ("2024-02-29", "2024-03-01", "2024-03-31", "2024-04-01"):
        store.upsert_count(1001, d, 1, 1)
    store.upsert_count(1002, "2024-03-15", 3, 0)
    store.session.commit()

    month = store.get_counts_for_month("2024-03")
    assert set(month) == {"1001|2024-03-01", "1001|2024-03-31", "1002|2024-03-15"}
    assert month["1002|2024-03-15"] == {"manual": 3, "electronic": 0}

    unit_month = store.get_counts_for_unit_month(1001, "2024-03")
    assert set(unit_month) == {"2024-03-01", "2024-03-31"}


def test_month_reads_reject_malformed_month(store):
    with pytest.raises(ValueError):
        store.get_counts_for_month("2024-%")


def test_lock_and_unlock_are_idempotent(store):
    store.lock_date("2024-03-05")
    store.lock_date("2024-03-05")
    store.lock_date("2024-04-01")
    store.session.commit()

    assert store.get_locked_dates_for_month("2024-03") == ["2024-03-05"]
    assert store.is_date_locked("2024-03-05")

    store.unlock_date("2024-03-05")
    store.unlock_date("2024-03-05")
    store.session.commit()

    assert store.get_locked_dates_for_month("2024-03") == []
    assert not store.is_date_locked("2024-03-05")
    assert store.is_date_locked("2024-04-01")


def test_lock_date_rejects_invalid_date(store):
    with pytest.raises(ValueError):
        store.lock_date("2024-02-30")


def test_lock_and_unlock_month(store):
    store.lock_date("2024-03-01")
    assert store.lock_month("2024-02") == 29
    store.session.commit()

    locked = store.get_locked_dates_for_month("2024-02")
    assert len(locked) == 29
    assert locked[0] == "2024-02-01" and locked[-1] == "2024-02-29"

    store.unlock_month("2024-02")
    store.session.commit()
    assert store.get_locked_dates_for_month("2024-02") == []
    assert store.get_locked_dates_for_month("2024-03") == ["2024-03-01"]


def test_create_editor_and_list_users(store):
    user = store.create_editor("comisaria1", "clave", 1001)
    store.session.commit()

    assert user.role == Role.EDITOR
    assert user.check_password("clave")

    users = store.get_all_users()
    assert [u.username for u in users] == ["admin", "comisaria1"]
    assert users[0].unit_name is None
    assert users[1].unit_name == "COMISARIA PRIMERA"


def test_create_editor_duplicate_username(store):
    store.create_editor("comisaria1", "clave", 1001)
    store.session.commit()
    with pytest.raises(DuplicateUsername):
        store.create_editor("comisaria1", "otra", 1002)


def test_create_editor_unknown_unit(store):
    with pytest.raises(UnknownUnit):
        store.create_editor("nadie", "clave", 9999)


def test_rural_unit_accepts_a_single_editor(store):
    store.create_editor("rural", "clave", RURAL_UNIT_ID)
    store.session.commit()

    with pytest.raises(RuralEditorExists):
        store.create_editor("rural2", "clave", RURAL_UNIT_ID)

    assert store.count_users_by_unit(RURAL_UNIT_ID) == 1


def test_other_units_accept_several_editors(store):
    store.create_editor("a", "clave", 1001)
    store.create_editor("b", "clave", 1001)
    store.session.commit()
    assert store.count_users_by_unit(1001) == 2


def test_delete_admin_is_a_noop(store):
    admin = store.get_user_by_username("admin")
    assert store.delete_user_by_id(admin.id) is False
    store.session.commit()
    assert store.get_user_by_username("admin") is not None


def test_delete_editor(store):
    user = store.create_editor("comisaria1", "clave", 1001)
    store.session.commit()

    assert store.delete_user_by_id(user.id) is True
    store.session.commit()
    assert store.get_user_by_username("comisaria1") is None
    assert store.delete_user_by_id(12345) is False


def test_update_user_password(store):
    user = store.create_editor("comisaria1", "clave", 1001)
    store.session.commit()

    assert store.update_user_password(user.id, "nueva") is True
    store.session.commit()
    assert store.get_user_by_username("comisaria1").check_password("nueva")
    assert store.update_user_password(12345, "x") is False


def test_seed_units_is_idempotent(store):
    assert store.seed_units(all_units()) == 0
    assert store.get_unit_by_id(1001).area_id == 1
    assert store.get_unit_by_id(RURAL_UNIT_ID).area_id == 4


def test_ensure_admin_only_once(store):
    assert store.ensure_admin("otra") is False
    assert store.get_user_by_username("admin").check_password("admin")


def test_reset_app(store):
    store.create_editor("comisaria1", "clave", 1001)
    store.upsert_count(1001, "2024-03-05", 1, 1)
    store.upsert_count(1002, "2024-03-06", 1, 1)
    store.lock_date("2024-03-05")
    store.session.commit()

    summary = store.reset_app()
    store.session.commit()

    assert summary == {"counts": 2, "locks": 1, "users": 1}
    assert store.get_counts_for_month("2024-03") == {}
    assert store.get_locked_dates_for_month("2024-03") == []
    assert [u.username for u in store.get_all_users()] == ["admin"]
