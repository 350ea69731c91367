from camera_puzzle.backend.engine.gameplay.game import GameEngine, GameSession, RenderState

__all__ = ["GameEngine", "GameSession", "RenderState"]
