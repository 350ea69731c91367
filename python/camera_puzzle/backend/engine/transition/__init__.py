from camera_puzzle.backend.engine.transition.transition import (
    Transition,
    TransitionEngine,
    ease_in_out_quad,
)

__all__ = ["Transition", "TransitionEngine", "ease_in_out_quad"]
