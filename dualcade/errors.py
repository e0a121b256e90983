"""
Engine exceptions
"""


class EngineError(Exception):
    """Base class for engine failures surfaced to the caller"""


class RendererUnavailableError(EngineError):
    """The rendering surface handed to the engine cannot draw frames"""


class EngineDisposedError(EngineError):
    """The engine was disposed and cannot run again"""
