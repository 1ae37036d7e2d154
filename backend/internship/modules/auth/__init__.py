# Authentication module

from internship.modules.auth.dependencies import (
    get_current_principal,
    get_optional_principal,
    get_overview_reader,
)

__all__ = [
    "get_current_principal",
    "get_optional_principal",
    "get_overview_reader",
]
