from .generation import GenerationPipeline
from .session_machine import TryOnSession, create_session

__all__ = ["GenerationPipeline", "TryOnSession", "create_session"]
