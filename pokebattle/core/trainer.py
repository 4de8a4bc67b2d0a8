"""Opposing trainer model."""

from pydantic import BaseModel

from pokebattle.core.party import Party


class Trainer(BaseModel):
    """An NPC trainer (or gym leader) and the party they battle with."""

    name: str
    party: Party
    is_gym_leader: bool = False
    money_base: int | None = None  # Overrides the loot table's money base

    @property
    def highest_level(self) -> int:
        return self.party.highest_level()
