from .resolve_stream import ResolveStreamUseCase
from .sports import SportsUseCase

__all__ = ["ResolveStreamUseCase", "SportsUseCase"]
