"""Game management layer — controller, networked session, phases.

Quick start::

    from throne.game import GameController

    ctrl = GameController()
    ctrl.events.on_game_over.append(print)
    ctrl.new_game()
    ctrl.click((4, 0))
    ctrl.click((3, 0))
"""

from throne.game.controller import GameController, GameEvents
from throne.game.interfaces import GamePhase, IGameController, SendCallback
from throne.game.network import NetworkSession

__all__ = [
    # Interfaces
    "GamePhase",
    "IGameController",
    "SendCallback",
    # Concrete
    "GameController",
    "GameEvents",
    "NetworkSession",
]
