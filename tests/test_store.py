from __future__ import annotations

import pytest

from floorplan.models import InvalidItemSpec, ItemSpec, ViewportState
from floorplan.store import LayoutStore


def _machine(ref: str, x: float = 0.0, y: float = 0.0, **kwargs) -> ItemSpec:
    return ItemSpec("machine", (x, y), reference_id=ref, **kwargs)


@pytest.mark.parametrize(
    "spec",
    [
        ItemSpec("robot", (0, 0)),
        ItemSpec("machine", (0, 0)),
        ItemSpec("label", (float("nan"), 0)),
        ItemSpec("label", (0, 0), size_class="huge"),
        ItemSpec("label", (0, 0), size_override=(0, 10)),
        ItemSpec("label", (0, 0), size_override=(float("inf"), None)),
    ],
)
def test_add_item_rejects_invalid_specs(store: LayoutStore, spec: ItemSpec) -> None:
    with pytest.raises(InvalidItemSpec):
        store.add_item(spec)
    assert len(store) == 0


def test_add_item_normalises_legacy_size_names(store: LayoutStore) -> None:
    uid = store.add_item(ItemSpec("label", (1, 2), size_class="lg"))
    assert store.get(uid).size_class == "large"


def test_uids_are_unique_and_never_reused(store: LayoutStore) -> None:
    first = store.add_item(_machine("A"))
    store.remove_item(first)
    second = store.add_item(_machine("A"))
    assert first != second
    assert first not in store


def test_preferred_uid_honoured_once(store: LayoutStore) -> None:
    assert store.add_item(_machine("A", uid="fur-1")) == "fur-1"
    store.remove_item("fur-1")
    with pytest.raises(InvalidItemSpec):
        store.add_item(_machine("A", uid="fur-1"))


def test_unknown_uid_operations_are_noops(store: LayoutStore) -> None:
    store.add_item(_machine("A"))
    before = store.snapshot().to_dict()
    assert store.move_item("missing", (1, 1)) is False
    assert store.remove_item("missing") is False
    assert store.relabel("missing", "x") is False
    assert store.snapshot().to_dict() == before


def test_non_finite_move_is_ignored(store: LayoutStore) -> None:
    uid = store.add_item(_machine("A", 5, 5))
    assert store.move_item(uid, (float("inf"), 0)) is False
    assert store.position_of(uid) == (5.0, 5.0)


def test_deletion_leaves_other_items_untouched(store: LayoutStore) -> None:
    a = store.add_item(_machine("A", 1, 1))
    b = store.add_item(_machine("B", 2, 2))
    c = store.add_item(_machine("C", 3, 3))
    store.remove_item(b)
    assert [item.uid for item in store.items()] == [a, c]
    assert store.position_of(a) == (1.0, 1.0)
    assert store.position_of(c) == (3.0, 3.0)


def test_reads_return_copies(store: LayoutStore) -> None:
    uid = store.add_item(_machine("A", 1, 1))
    copy = store.get(uid)
    copy.position = (99.0, 99.0)
    snapshot = store.snapshot()
    snapshot.items[0].display_text = "changed"
    snapshot.viewport.scale = 2.0
    assert store.position_of(uid) == (1.0, 1.0)
    assert store.get(uid).display_text is None
    assert store.scale == 1.0


def test_set_scale_clamps_and_ignores_nan(store: LayoutStore) -> None:
    assert store.set_scale(9.0) == 2.5
    assert store.set_scale(float("nan")) == 2.5
    assert store.set_scale("bogus") == 2.5
    assert store.set_scale(0.1) == 0.5


def test_set_pan_ignores_non_finite(store: LayoutStore) -> None:
    store.set_pan((10, -4))
    store.set_pan((float("inf"), 0))
    assert store.pan == (10.0, -4.0)


def test_find_by_reference(store: LayoutStore) -> None:
    uid = store.add_item(_machine("A"))
    assert store.find_by_reference("A") == uid
    assert store.find_by_reference("B") is None
    assert store.reference_ids() == {"A"}


def test_load_replaces_contents_and_viewport(store: LayoutStore) -> None:
    store.add_item(_machine("A"))
    uids = store.load(
        [_machine("B", 1, 2, uid="b-1"), ItemSpec("label", (3, 4), display_text="x")],
        ViewportState(pan=(5.0, 6.0), scale=1.5),
    )
    assert uids[0] == "b-1"
    assert [item.reference_id for item in store.items()] == ["B", None]
    assert store.pan == (5.0, 6.0)
    assert store.scale == 1.5


def test_load_is_all_or_nothing(store: LayoutStore) -> None:
    uid = store.add_item(_machine("A", 7, 7))
    with pytest.raises(InvalidItemSpec):
        store.load([_machine("B"), ItemSpec("robot", (0, 0))])
    assert [item.uid for item in store.items()] == [uid]


def test_load_rejects_duplicate_uids(store: LayoutStore) -> None:
    with pytest.raises(InvalidItemSpec):
        store.load([_machine("A", uid="x"), _machine("B", uid="x")])
    assert len(store) == 0


def test_load_rejects_uids_of_deleted_items(store: LayoutStore) -> None:
    uid = store.add_item(_machine("A"))
    store.remove_item(uid)
    with pytest.raises(InvalidItemSpec):
        store.load([_machine("A", uid=uid)])


def test_load_may_keep_live_uids(store: LayoutStore) -> None:
    uid = store.add_item(_machine("A"))
    store.load([_machine("A", 10, 10, uid=uid)])
    assert store.position_of(uid) == (10.0, 10.0)


def test_generated_uid_skips_preferred_uid_in_same_load(store: LayoutStore) -> None:
    uids = store.load([_machine("A"), _machine("B", uid="item-1")])
    assert uids[1] == "item-1"
    assert uids[0] != "item-1"


@pytest.mark.parametrize(
    "spec",
    [
        ItemSpec("label", (0, 0), size_class=["x"]),
        ItemSpec("machine", (0, 0), reference_id=["a"]),
        ItemSpec("label", (0, 0), uid={"a": 1}),
        ItemSpec("label", (0, 0), display_text=3),
        ItemSpec("label", (0, 0), reference_id="M1"),
        ItemSpec("zone", (0, 0), reference_id="M1"),
    ],
)
def test_add_item_rejects_wrongly_typed_fields(store: LayoutStore, spec: ItemSpec) -> None:
    with pytest.raises(InvalidItemSpec):
        store.add_item(spec)
    assert len(store) == 0


def test_reference_ids_only_count_machines(store: LayoutStore) -> None:
    store.add_item(ItemSpec("label", (0, 0), display_text="M1"))
    uid = store.add_item(_machine("M1"))
    assert store.reference_ids() == {"M1"}
    assert store.find_by_reference("M1") == uid
