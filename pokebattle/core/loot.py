"""Item catalog, loot tables and reward rolls."""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from pokebattle.core.errors import UnknownItemError, UnknownLootTableError
from pokebattle.core.rng import RandomSource
from pokebattle.utils.helpers import weighted_random_choice

if TYPE_CHECKING:
    from pokebattle.core.difficulty import DifficultyProfile
    from pokebattle.core.trainer import Trainer

logger = logging.getLogger(__name__)

RARE_ENCOUNTER_CHANCE = 0.05
TM_SELL_PRICE = 3000


class ItemCategory(str, Enum):
    POKEBALL = "pokeball"
    POTION = "potion"
    HELD_ITEM = "held_item"
    BERRY = "berry"
    TM = "tm"
    KEY_ITEM = "key_item"
    VALUABLE = "valuable"


class ItemRarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class Item(BaseModel):
    """An item definition; loot rolls hand out copies with a quantity."""

    id: str
    name: str
    category: ItemCategory
    rarity: ItemRarity = ItemRarity.COMMON
    sell_price: int = 0
    quantity: int = 1

    # Effects (only the ones relevant to the category are set)
    catch_mod: float | None = None  # Ball multiplier
    heal_amount: int | None = None  # Flat HP
    heal_percent: float | None = None  # Fraction of max HP
    revive_hp: float | None = None  # Fraction of max HP on revive
    restore_pp: int | None = None
    cures_status: bool = False
    effect: str | None = None  # Held-item effect tag
    boost_mod: float | None = None
    recoil_percent: float | None = None
    one_use: bool = False
    move: str | None = None  # TM move


def _item(id: str, name: str, category: ItemCategory, rarity: ItemRarity, sell_price: int, **effects) -> Item:
    return Item(id=id, name=name, category=category, rarity=rarity, sell_price=sell_price, **effects)


_C, _U, _R, _E, _L = (
    ItemRarity.COMMON,
    ItemRarity.UNCOMMON,
    ItemRarity.RARE,
    ItemRarity.EPIC,
    ItemRarity.LEGENDARY,
)

# fmt: off
ITEMS: dict[str, Item] = {item.id: item for item in [
    # Balls
    _item("pokeball", "Poke Ball", ItemCategory.POKEBALL, _C, 100, catch_mod=1),
    _item("greatball", "Great Ball", ItemCategory.POKEBALL, _U, 300, catch_mod=1.5),
    _item("ultraball", "Ultra Ball", ItemCategory.POKEBALL, _R, 600, catch_mod=2),
    _item("masterball", "Master Ball", ItemCategory.POKEBALL, _L, 0, catch_mod=255),
    # Medicine
    _item("potion", "Potion", ItemCategory.POTION, _C, 100, heal_amount=20),
    _item("superpotion", "Super Potion", ItemCategory.POTION, _U, 350, heal_amount=50),
    _item("hyperpotion", "Hyper Potion", ItemCategory.POTION, _R, 600, heal_amount=200),
    _item("maxpotion", "Max Potion", ItemCategory.POTION, _E, 1250, heal_amount=9999),
    _item("fullrestore", "Full Restore", ItemCategory.POTION, _E, 1500, heal_amount=9999, cures_status=True),
    _item("revive", "Revive", ItemCategory.POTION, _R, 750, revive_hp=0.5),
    _item("maxrevive", "Max Revive", ItemCategory.POTION, _E, 2000, revive_hp=1.0),
    # Berries
    _item("oranberry", "Oran Berry", ItemCategory.BERRY, _C, 10, heal_amount=10),
    _item("sitrusberry", "Sitrus Berry", ItemCategory.BERRY, _U, 20, heal_percent=0.25),
    _item("leppaberry", "Leppa Berry", ItemCategory.BERRY, _U, 20, restore_pp=10),
    _item("lumberry", "Lum Berry", ItemCategory.BERRY, _R, 50, cures_status=True),
    # Held items
    _item("leftovers", "Leftovers", ItemCategory.HELD_ITEM, _R, 1000, effect="heal_each_turn", heal_percent=0.0625),
    _item("choiceband", "Choice Band", ItemCategory.HELD_ITEM, _R, 1000, effect="boost_attack", boost_mod=1.5),
    _item("choicespecs", "Choice Specs", ItemCategory.HELD_ITEM, _R, 1000, effect="boost_sp_attack", boost_mod=1.5),
    _item("focussash", "Focus Sash", ItemCategory.HELD_ITEM, _R, 500, effect="survive_ohko", one_use=True),
    _item("lifeorb", "Life Orb", ItemCategory.HELD_ITEM, _E, 1500, effect="boost_damage", boost_mod=1.3,
          recoil_percent=0.1),
    # Valuables
    _item("nugget", "Nugget", ItemCategory.VALUABLE, _R, 5000),
    _item("bigpearl", "Big Pearl", ItemCategory.VALUABLE, _U, 3750),
    _item("stardust", "Stardust", ItemCategory.VALUABLE, _U, 1000),
    _item("starpiece", "Star Piece", ItemCategory.VALUABLE, _R, 4900),
]}
# fmt: on

# TM number -> move taught
TM_MOVES: dict[int, str] = {
    1: "Focus Punch",
    6: "Toxic",
    10: "Hidden Power",
    13: "Ice Beam",
    15: "Hyper Beam",
    24: "Thunderbolt",
    26: "Earthquake",
    29: "Psychic",
    35: "Flamethrower",
    36: "Sludge Bomb",
}


class LootTable(BaseModel):
    """Weighted drops for one kind of encounter."""

    drop_chance: float = Field(ge=0)
    money_base: int | None = None  # Multiplied by level
    guaranteed: list[str] = Field(default_factory=list)  # "tm" generates a TM
    weights: dict[str, int]  # item id -> relative weight


LOOT_TABLES: dict[str, LootTable] = {
    "wild_pokemon": LootTable(
        drop_chance=0.1,
        weights={"oranberry": 30, "sitrusberry": 15, "leppaberry": 10, "lumberry": 5},
    ),
    "trainer": LootTable(
        drop_chance=1.0,
        money_base=100,
        weights={"potion": 20, "superpotion": 10, "pokeball": 15, "greatball": 8},
    ),
    "gym_leader": LootTable(
        drop_chance=1.0,
        money_base=500,
        guaranteed=["tm"],
        weights={"hyperpotion": 20, "ultraball": 15, "revive": 10, "leftovers": 3},
    ),
    "dungeon_chest": LootTable(
        drop_chance=1.0,
        weights={
            "superpotion": 20,
            "hyperpotion": 10,
            "greatball": 15,
            "ultraball": 8,
            "revive": 10,
            "stardust": 10,
            "nugget": 3,
            "focussash": 2,
            "leftovers": 2,
        },
    ),
    "hidden_item": LootTable(
        drop_chance=1.0,
        weights={
            "pokeball": 25,
            "potion": 25,
            "oranberry": 20,
            "stardust": 10,
            "bigpearl": 5,
            "starpiece": 3,
            "nugget": 2,
        },
    ),
}


class LootResult(BaseModel):
    money: int = 0
    items: list[Item] = Field(default_factory=list)


class RareEncounter(BaseModel):
    is_rare: bool
    level_bonus: int = 0
    guaranteed_item: bool = False


def get_item(item_id: str) -> Item:
    """Catalog lookup, raising UnknownItemError for unknown ids."""
    try:
        return ITEMS[item_id]
    except KeyError:
        raise UnknownItemError(item_id) from None


class LootSystem:
    """Rolls rewards against the loot tables, scaled by an optional difficulty profile."""

    def __init__(self, difficulty: DifficultyProfile | None = None, rng: RandomSource | None = None):
        self.difficulty = difficulty
        self.rng = rng or RandomSource()

    def roll_loot(
        self,
        table_id: str,
        level: int = 10,
        item_count: int = 1,
        guarantee_item: bool = False,
        money_base: int | None = None,
    ) -> LootResult:
        """Roll money and items from ``table_id``.

        Money is only paid by tables with a money base. Items drop when
        ``guarantee_item`` is set or the (difficulty scaled) drop chance hits.
        """
        table = LOOT_TABLES.get(table_id)
        if table is None:
            raise UnknownLootTableError(table_id)

        result = LootResult()
        base = money_base if money_base is not None else table.money_base
        if base:
            result.money = self.calculate_money(base, level)

        drop_chance = table.drop_chance
        if self.difficulty is not None:
            drop_chance = self.difficulty.get_item_drop_rate(drop_chance)

        if table.weights and (guarantee_item or self.rng.chance(drop_chance)):
            for _ in range(item_count):
                result.items.append(self.roll_item(table.weights))

        for guaranteed in table.guaranteed:
            if guaranteed == "tm":
                result.items.append(self.generate_tm(level))
            else:
                result.items.append(get_item(guaranteed).model_copy(update={"quantity": 1}))

        logger.debug("Loot from %s (level %d): %d money, %d items", table_id, level, result.money, len(result.items))
        return result

    def roll_item(self, weights: dict[str, int]) -> Item:
        item_id = weighted_random_choice(weights, self.rng)
        return get_item(item_id).model_copy(update={"quantity": 1})

    def calculate_money(self, base_money: int, level: int) -> int:
        """base * level, difficulty money multiplier, then 90-110% variance."""
        money = base_money * level
        if self.difficulty is not None:
            money = self.difficulty.get_money_reward(money)
        return math.floor(money * self.rng.uniform(0.9, 1.1))

    def generate_tm(self, level: int = 10) -> Item:
        number = self.rng.choice(list(TM_MOVES))
        move = TM_MOVES[number]
        return Item(
            id=f"tm{number}",
            name=f"TM{number:02d} {move}",
            category=ItemCategory.TM,
            rarity=ItemRarity.RARE,
            move=move,
            sell_price=TM_SELL_PRICE,
        )

    def get_wild_pokemon_loot(self, level: int) -> LootResult:
        return self.roll_loot("wild_pokemon", level=level)

    def get_trainer_loot(self, trainer: Trainer) -> LootResult:
        """Trainer payout: scaled by their highest level; gym leaders give two items and a TM."""
        table_id = "gym_leader" if trainer.is_gym_leader else "trainer"
        return self.roll_loot(
            table_id,
            level=trainer.highest_level,
            item_count=2 if trainer.is_gym_leader else 1,
            guarantee_item=True,
            money_base=trainer.money_base,
        )

    def get_dungeon_chest_loot(self, dungeon_level: int) -> LootResult:
        return self.roll_loot("dungeon_chest", level=dungeon_level, item_count=2, guarantee_item=True)

    def roll_rare_encounter(self, area_level: int) -> RareEncounter:
        if self.rng.chance(RARE_ENCOUNTER_CHANCE):
            return RareEncounter(is_rare=True, level_bonus=math.floor(area_level * 0.2), guaranteed_item=True)
        return RareEncounter(is_rare=False)

    def get_item(self, item_id: str) -> Item:
        return get_item(item_id)
