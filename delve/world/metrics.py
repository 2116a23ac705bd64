from typing import Dict


def init_metrics() -> Dict[str, int | float | bool]:
    return {
        'rooms_target': 0,
        'rooms_placed': 0,
        'room_proposals': 0,
        'enemies_attempted': 0,
        'enemies_placed': 0,
        'boss_placed': False,
        'merchants_target': 0,
        'merchants_placed': 0,
        'merchants_displacing': 0,
        'chests_placed': 0,
        'crafting_forced': False,
        'exits_target': 0,
        'exits_placed': 0,
        'exits_forced': False,
        'unreachable_features_initial': 0,
        'corridors_carved': 0,
        'runtime_ms': 0.0,
    }
