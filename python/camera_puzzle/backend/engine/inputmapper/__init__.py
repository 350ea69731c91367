from camera_puzzle.backend.engine.inputmapper.mapper import InputMapper

__all__ = ["InputMapper"]
