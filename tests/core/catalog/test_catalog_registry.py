"""아이템 카탈로그 테스트: JSON 로드, 검증, 조회"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from src.core.catalog import (
    CatalogError,
    ItemCatalog,
    ItemDefinition,
    Rarity,
    build_definition,
)

SEED_SCANNABLES_PATH = Path("src/data/seed_scannables.json")


def _raw(uid: str = "rock_01", **overrides) -> dict:
    raw = {
        "uid": uid,
        "display_name": "Rock",
        "rarity": "common",
        "scan_time": 1.5,
        "biome_affinity": ["starter"],
    }
    raw.update(overrides)
    return raw


def _write(tmp_path: Path, entries: list[dict]) -> Path:
    path = tmp_path / "items.json"
    path.write_text(json.dumps(entries), encoding="utf-8")
    return path


# ── Rarity ────────────────────────────────────────────────────


class TestRarity:
    def test_ordinals(self) -> None:
        assert Rarity.COMMON.ordinal == 0
        assert Rarity.UNCOMMON.ordinal == 1
        assert Rarity.RARE.ordinal == 2
        assert Rarity.LEGENDARY.ordinal == 3

    def test_from_string(self) -> None:
        assert Rarity("legendary") is Rarity.LEGENDARY


# ── build_definition ──────────────────────────────────────────


class TestBuildDefinition:
    def test_basic(self) -> None:
        definition = build_definition(_raw(tags=["mineral"]))
        assert definition.uid == "rock_01"
        assert definition.rarity is Rarity.COMMON
        assert definition.biome_affinity == frozenset({"starter"})
        assert definition.tags == ("mineral",)
        assert definition.unlock_threshold == 0

    def test_zero_scan_time_clamped(self) -> None:
        definition = build_definition(_raw(scan_time=0), min_scan_time=0.1)
        assert definition.scan_time == 0.1

    def test_negative_scan_time_clamped(self) -> None:
        definition = build_definition(_raw(scan_time=-3.0), min_scan_time=0.25)
        assert definition.scan_time == 0.25

    def test_infinite_scan_time_clamped(self) -> None:
        definition = build_definition(_raw(scan_time=float("inf")), min_scan_time=0.1)
        assert definition.scan_time == 0.1

    def test_negative_unlock_threshold_defaults(self) -> None:
        assert build_definition(_raw(unlock_threshold=-2)).unlock_threshold == 0

    def test_unknown_rarity_raises(self) -> None:
        with pytest.raises(ValueError):
            build_definition(_raw(rarity="mythic"))

    def test_missing_key_raises(self) -> None:
        raw = _raw()
        del raw["scan_time"]
        with pytest.raises(KeyError):
            build_definition(raw)

    def test_string_biome_affinity_wrapped(self) -> None:
        definition = build_definition(_raw(biome_affinity="starter"))
        assert definition.biome_affinity == frozenset({"starter"})
        assert definition.belongs_to("starter")

    def test_invalid_biome_affinity_raises(self) -> None:
        with pytest.raises(ValueError):
            build_definition(_raw(biome_affinity=["starter", 3]))
        with pytest.raises(TypeError):
            build_definition(_raw(biome_affinity=None))

    def test_display_name_defaults_to_uid(self) -> None:
        raw = _raw()
        del raw["display_name"]
        assert build_definition(raw).display_name == "rock_01"


# ── ItemCatalog ───────────────────────────────────────────────


class TestItemCatalog:
    def test_load_seed_file(self) -> None:
        catalog = ItemCatalog()
        count = catalog.load_from_json(SEED_SCANNABLES_PATH)
        assert count == catalog.count()
        assert count >= 10
        rock = catalog.get("rock_01")
        assert rock is not None
        assert rock.rarity is Rarity.COMMON
        assert "starter" in catalog.biomes()

    def test_invalid_entries_skipped(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            [
                _raw("ok_01"),
                _raw("bad_rarity", rarity="mythic"),
                {"uid": "no_fields"},
                _raw("ok_02"),
            ],
        )
        catalog = ItemCatalog()
        assert catalog.load_from_json(path) == 2
        assert "ok_01" in catalog
        assert "bad_rarity" not in catalog

    def test_non_object_entries_skipped(self, tmp_path: Path) -> None:
        path = _write(tmp_path, [_raw("ok_01"), "oops", None, 7, _raw("ok_02")])
        catalog = ItemCatalog()
        assert catalog.load_from_json(path) == 2
        assert {d.uid for d in catalog.get_all()} == {"ok_01", "ok_02"}

    def test_string_biome_affinity_stays_in_pool(self, tmp_path: Path) -> None:
        path = _write(tmp_path, [_raw("ok_01", biome_affinity="starter")])
        catalog = ItemCatalog()
        catalog.load_from_json(path)
        assert [d.uid for d in catalog.get_by_biome("starter")] == ["ok_01"]
        assert catalog.biomes() == {"starter"}

    def test_non_list_file_loads_nothing(self, tmp_path: Path) -> None:
        path = tmp_path / "items.json"
        path.write_text(json.dumps({"uid": "rock_01"}), encoding="utf-8")
        catalog = ItemCatalog()
        assert catalog.load_from_json(path) == 0
        assert catalog.count() == 0

    def test_non_finite_unlock_threshold_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / "items.json"
        path.write_text(
            '[{"uid": "x_01", "rarity": "common", "scan_time": 1.0, '
            '"unlock_threshold": Infinity}]',
            encoding="utf-8",
        )
        assert ItemCatalog().load_from_json(path) == 0

    def test_duplicate_uid_aborts_load(self, tmp_path: Path) -> None:
        path = _write(tmp_path, [_raw("dup"), _raw("dup")])
        with pytest.raises(CatalogError):
            ItemCatalog().load_from_json(path)

    def test_duplicate_register_raises(self) -> None:
        definition = build_definition(_raw())
        catalog = ItemCatalog([definition])
        with pytest.raises(CatalogError):
            catalog.register(definition)

    def test_get_missing_returns_none(self, catalog: ItemCatalog) -> None:
        assert catalog.get("nope") is None

    def test_get_by_biome(self, catalog: ItemCatalog) -> None:
        uids = {d.uid for d in catalog.get_by_biome("crystal_caves")}
        assert uids == {"rock_01", "quartz_01", "geode_01"}

    def test_get_by_rarity(self, catalog: ItemCatalog) -> None:
        legendaries = catalog.get_by_rarity(Rarity.LEGENDARY)
        assert [d.uid for d in legendaries] == ["monolith_01"]

    def test_definitions_are_immutable(self, catalog: ItemCatalog) -> None:
        rock = catalog.get("rock_01")
        assert isinstance(rock, ItemDefinition)
        with pytest.raises(AttributeError):
            rock.scan_time = 0.0  # type: ignore[misc]
