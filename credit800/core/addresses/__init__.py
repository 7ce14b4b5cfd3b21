from credit800.core.addresses.database import (
    ALIASES,
    CFPB_ADDRESS,
    CREDITOR_DATABASE,
    CreditorAddress,
)
from credit800.core.addresses.resolver import (
    AddressLookupError,
    AddressResolver,
    TTLCache,
    format_address,
    format_address_lines,
    get_bureau_address,
    lookup_static,
    normalize_name,
)

__all__ = [
    "ALIASES",
    "AddressLookupError",
    "AddressResolver",
    "CFPB_ADDRESS",
    "CREDITOR_DATABASE",
    "CreditorAddress",
    "TTLCache",
    "format_address",
    "format_address_lines",
    "get_bureau_address",
    "lookup_static",
    "normalize_name",
]
