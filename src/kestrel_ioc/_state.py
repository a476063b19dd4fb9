# kestrel_ioc/_state.py
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .container import Container

# process-scoped handle; written only by api.init() and api.reset()
_container: Optional["Container"] = None
