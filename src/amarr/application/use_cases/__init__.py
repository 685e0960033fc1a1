from .torznab_caps import TorznabCapsUseCase
from .torznab_search import TorznabSearchUseCase

__all__ = ["TorznabCapsUseCase", "TorznabSearchUseCase"]
