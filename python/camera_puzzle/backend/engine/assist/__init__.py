from camera_puzzle.backend.engine.assist.assist import HintBudget, Move, MoveHistory

__all__ = ["HintBudget", "Move", "MoveHistory"]
