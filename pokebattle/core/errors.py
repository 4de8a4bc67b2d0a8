"""Exception hierarchy for PokeBattle.

Only data-integrity and programming errors raise. Recoverable player
mistakes (no PP, switching to a fainted Pokemon) are reported as battle
events, and RNG outcomes (misses, failed catches) are plain return values.
"""


class PokeBattleError(Exception):
    """Base for all PokeBattle errors."""


class InvalidDataError(PokeBattleError):
    """Species, move or saved Pokemon data failed validation."""


class UnknownSpeciesError(InvalidDataError):
    def __init__(self, name: str):
        super().__init__(f"Unknown species '{name}'")
        self.name = name


class UnknownMoveError(InvalidDataError):
    def __init__(self, name: str, context: str = ""):
        detail = f" (referenced by {context})" if context else ""
        super().__init__(f"Unknown move '{name}'{detail}")
        self.name = name
        self.context = context


class InvalidPokemonDataError(InvalidDataError):
    pass


class InvalidDifficultyError(PokeBattleError):
    def __init__(self, difficulty: str):
        super().__init__(f"Unknown difficulty preset '{difficulty}'")
        self.difficulty = difficulty


class UnknownLootTableError(PokeBattleError):
    def __init__(self, table_id: str):
        super().__init__(f"Unknown loot table '{table_id}'")
        self.table_id = table_id


class UnknownItemError(PokeBattleError):
    def __init__(self, item_id: str):
        super().__init__(f"Unknown item '{item_id}'")
        self.item_id = item_id


class BattleError(PokeBattleError):
    """A battle could not be started or driven."""


class InvalidPhaseError(BattleError):
    def __init__(self, action: str, phase: str):
        super().__init__(f"Cannot {action} during the '{phase}' phase")
        self.action = action
        self.phase = phase
