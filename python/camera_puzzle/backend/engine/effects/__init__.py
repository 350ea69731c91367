from camera_puzzle.backend.engine.effects.effects import Effect, EffectKind, EffectLog

__all__ = ["Effect", "EffectKind", "EffectLog"]
