from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import pytest

from configs_provider.core import (
    CONFIGS,
    SINGLE_CONFIG_ID,
    ConfigIdNotFound,
    ConfigRegistry,
    ConfigTypeMismatch,
    ConfigTypeNotRegistered,
    DuplicateIdInBatch,
    DuplicateTypeRegistration,
    NotSingletonConfig,
    type_tag,
)


class Rarity(Enum):
    COMMON = 1
    RARE = 2


@dataclass(frozen=True)
class HeroConfig:
    id: int
    name: str
    rarity: Rarity = Rarity.COMMON


@dataclass(frozen=True)
class GameSettings:
    max_players: int
    tick_rate: float


@dataclass(frozen=True)
class TournamentSettings(GameSettings):
    rounds: int = 3


@dataclass(frozen=True)
class ShopConfig:
    id: int
    price: int


def _heroes() -> list[HeroConfig]:
    return [HeroConfig(1, "knight"), HeroConfig(2, "archer", Rarity.RARE), HeroConfig(7, "mage")]


def test_singleton_round_trip_and_unregistered_type() -> None:
    reg = ConfigRegistry()
    settings = GameSettings(max_players=4, tick_rate=30.0)
    reg.add_singleton(settings)

    assert reg.get(GameSettings) is settings
    assert reg.get_table(GameSettings) == {SINGLE_CONFIG_ID: settings}

    with pytest.raises(NotSingletonConfig):
        reg.get(ShopConfig)


def test_get_without_id_on_a_multi_config_table_is_not_singleton() -> None:
    reg = ConfigRegistry()
    reg.add_many(HeroConfig, lambda h: h.id, _heroes())

    with pytest.raises(NotSingletonConfig) as exc:
        reg.get(HeroConfig)
    assert "get_all" in str(exc.value)


def test_add_many_then_try_get() -> None:
    reg = ConfigRegistry()
    heroes = _heroes()
    reg.add_many(HeroConfig, lambda h: h.id, heroes)

    for hero in heroes:
        assert reg.try_get(HeroConfig, hero.id) == (True, hero)
        assert reg.get(HeroConfig, hero.id) == hero

    assert reg.try_get(HeroConfig, 3) == (False, None)
    assert reg.try_get(ShopConfig, 1) == (False, None)


def test_add_many_rejects_repeated_ids() -> None:
    reg = ConfigRegistry()
    with pytest.raises(DuplicateIdInBatch) as exc:
        reg.add_many(HeroConfig, lambda h: 5, _heroes())
    assert exc.value.config_id == 5
    # A failed batch leaves nothing behind.
    assert not reg.has(HeroConfig)


@pytest.mark.parametrize("second", ["singleton", "many"])
def test_registering_a_type_twice_fails(second: str) -> None:
    reg = ConfigRegistry()
    reg.add_singleton(ShopConfig(0, 10))

    with pytest.raises(DuplicateTypeRegistration):
        if second == "singleton":
            reg.add_singleton(ShopConfig(0, 20))
        else:
            reg.add_many(ShopConfig, lambda s: s.id, [ShopConfig(1, 5)])

    assert reg.get(ShopConfig).price == 10


def test_get_by_id_errors() -> None:
    reg = ConfigRegistry()
    with pytest.raises(ConfigTypeNotRegistered):
        reg.get(HeroConfig, 1)

    reg.add_many(HeroConfig, lambda h: h.id, _heroes())
    with pytest.raises(ConfigIdNotFound) as exc:
        reg.get(HeroConfig, 99)
    assert exc.value.config_id == 99
    assert exc.value.tag == type_tag(HeroConfig)

    # Lookup errors stay catchable as the builtin lookup errors.
    with pytest.raises(KeyError):
        reg.get(HeroConfig, 99)
    with pytest.raises(LookupError):
        reg.get(ShopConfig, 1)


def test_get_all_defaults_to_empty() -> None:
    reg = ConfigRegistry()
    assert reg.get_all(HeroConfig) == []

    reg.add_many(HeroConfig, lambda h: h.id, _heroes())
    assert sorted(h.id for h in reg.get_all(HeroConfig)) == [1, 2, 7]


def test_update_to_replaces_table_and_sets_version() -> None:
    reg = ConfigRegistry()
    reg.add_many(HeroConfig, lambda h: h.id, _heroes())
    reg.add_singleton(GameSettings(2, 20.0))

    new_table = {10: HeroConfig(10, "rogue")}
    reg.update_to(42, {HeroConfig: new_table})

    assert reg.version == 42
    assert reg.get_all(HeroConfig) == [HeroConfig(10, "rogue")]
    # Not merged: the old ids are gone.
    assert reg.try_get(HeroConfig, 1) == (False, None)
    # Types absent from the update are untouched.
    assert reg.get(GameSettings) == GameSettings(2, 20.0)


def test_update_to_with_empty_mapping_still_sets_version() -> None:
    reg = ConfigRegistry()
    reg.add_singleton(GameSettings(2, 20.0))

    reg.update_to(7, {})
    assert reg.version == 7
    reg.update_to(3, None)
    assert reg.version == 3
    assert reg.get(GameSettings).max_players == 2


def test_replace_all_accepts_tags_and_pairs() -> None:
    reg = ConfigRegistry()
    reg.replace_all({type_tag(ShopConfig): [(1, ShopConfig(1, 5)), (2, ShopConfig(2, 8))]})

    assert reg.get(ShopConfig, 2).price == 8
    assert reg.tags() == [type_tag(ShopConfig)]


def test_replace_all_with_bad_table_leaves_registry_unchanged() -> None:
    reg = ConfigRegistry()
    reg.add_singleton(GameSettings(2, 20.0))

    with pytest.raises(DuplicateIdInBatch):
        reg.replace_all(
            {
                GameSettings: {0: GameSettings(8, 60.0)},
                ShopConfig: [(1, ShopConfig(1, 5)), (1, ShopConfig(1, 6))],
            }
        )

    assert reg.get(GameSettings) == GameSettings(2, 20.0)
    assert not reg.has(ShopConfig)


def test_export_all_is_a_read_only_snapshot() -> None:
    reg = ConfigRegistry()
    reg.add_singleton(GameSettings(2, 20.0))

    exported = reg.export_all()
    with pytest.raises(TypeError):
        exported["x"] = {}  # type: ignore[index]

    reg.add_many(HeroConfig, lambda h: h.id, _heroes())
    assert list(exported) == [type_tag(GameSettings)]
    assert len(reg) == 2
    assert HeroConfig in reg


def test_version_must_be_unsigned_64_bit() -> None:
    reg = ConfigRegistry()
    reg.set_version(2**64 - 1)
    assert reg.version == 2**64 - 1

    with pytest.raises(ValueError):
        reg.set_version(-1)
    with pytest.raises(ValueError):
        reg.update_to(2**64, {})
    assert reg.version == 2**64 - 1


def test_add_singleton_under_an_explicit_type() -> None:
    reg = ConfigRegistry()
    settings = TournamentSettings(8, 60.0)
    reg.add_singleton(settings, cls=GameSettings)

    assert reg.get(GameSettings) is settings
    assert not reg.has(TournamentSettings)


def test_configs_of_the_wrong_type_are_rejected_on_store() -> None:
    reg = ConfigRegistry()
    with pytest.raises(ConfigTypeMismatch) as exc:
        reg.add_singleton({"motd": "hello"}, cls=GameSettings)
    assert exc.value.tag == type_tag(GameSettings)
    assert not reg.has(GameSettings)

    with pytest.raises(ConfigTypeMismatch):
        reg.add_table(HeroConfig, {1: HeroConfig(1, "knight"), 2: ShopConfig(2, 10)})
    assert not reg.has(HeroConfig)

    reg.add_many(HeroConfig, lambda h: h.id, _heroes())
    with pytest.raises(ConfigTypeMismatch):
        reg.replace_all({ShopConfig: {1: ShopConfig(1, 5)}, HeroConfig: {1: "not a hero"}})
    assert not reg.has(ShopConfig)
    assert reg.get(HeroConfig, 1) == HeroConfig(1, "knight")


def test_configs_stored_by_tag_are_checked_on_read() -> None:
    reg = ConfigRegistry()
    reg.add_table(type_tag(HeroConfig), {1: "not a hero", 2: HeroConfig(2, "archer")})

    with pytest.raises(ConfigTypeMismatch):
        reg.get(HeroConfig, 1)
    with pytest.raises(ConfigTypeMismatch):
        reg.get_all(HeroConfig)
    assert reg.try_get(HeroConfig, 1) == (False, None)
    assert reg.get(HeroConfig, 2).name == "archer"
    assert reg.get(type_tag(HeroConfig), 1) == "not a hero"


def test_ids_outside_int32_are_simply_not_found() -> None:
    reg = ConfigRegistry()
    reg.add_many(HeroConfig, lambda h: h.id, _heroes())

    with pytest.raises(ConfigIdNotFound):
        reg.get(HeroConfig, 2**31)
    with pytest.raises(ConfigIdNotFound):
        reg.get(HeroConfig, -(2**31) - 1)
    assert reg.try_get(HeroConfig, 2**31) == (False, None)
    assert reg.try_get(HeroConfig, True) == (False, None)


def test_process_wide_registry_exists() -> None:
    assert isinstance(CONFIGS, ConfigRegistry)
