import asyncio
import time
from dataclasses import dataclass
from enum import Enum

import configs_provider
from configs_provider import ConfigRegistry, ConfigsSerializer, ConfigSynchronizer, ExclusionSet
from configs_provider.runtime import run


class Rarity(Enum):
    COMMON = 1
    RARE = 2
    EPIC = 3


@dataclass(frozen=True)
class HeroConfig:
    id: int
    name: str
    rarity: Rarity
    hp: int


@dataclass(frozen=True)
class GameSettings:
    max_players: int
    tick_rate: float


@dataclass(frozen=True)
class EditorPrefabs:
    hero_prefab: str


def main() -> None:
    serializer = ConfigsSerializer(ExclusionSet(EditorPrefabs), indent=2)

    # What the content team publishes.
    source = ConfigRegistry()
    source.add_singleton(GameSettings(max_players=4, tick_rate=30.0))
    source.add_singleton(EditorPrefabs("Assets/Heroes/Hero.prefab"))
    source.add_many(
        HeroConfig,
        lambda h: h.id,
        [
            HeroConfig(1, "knight", Rarity.COMMON, 120),
            HeroConfig(2, "dragon", Rarity.EPIC, 900),
        ],
    )
    print(serializer.serialize(source, 1))

    server = run(port=0, log_level="warning")
    server.backend.publish_registry(source, 1, serializer=serializer)

    # What a game client does on startup and then periodically.
    sync = ConfigSynchronizer(configs_provider.CONFIGS, server.client(), serializer)
    asyncio.run(sync.check_for_update())

    configs = configs_provider.CONFIGS
    print("version", configs.version)
    print("settings", configs.get(GameSettings))
    print("dragon", configs.get(HeroConfig, 2))
    print("prefabs synced?", configs.has(EditorPrefabs))

    try:
        while True:
            time.sleep(30)
            if asyncio.run(sync.check_for_update()):
                print("updated to", configs.version)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
