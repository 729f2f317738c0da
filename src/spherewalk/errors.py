from __future__ import annotations


class SpherewalkError(Exception):
    pass


class ConfigurationError(SpherewalkError, ValueError):
    pass


class BufferStateError(SpherewalkError, RuntimeError):
    pass


class DegenerateMathError(SpherewalkError, ArithmeticError):
    """
    Raised when a rendering pass hits an undefined operation (zero-length
    normalization, division by a zero maximum). `stage` names the failing step.
    """

    def __init__(self, stage: str, msg: str) -> None:
        super().__init__(f"{stage}: {msg}")
        self.stage = stage


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ConfigurationError(msg)
