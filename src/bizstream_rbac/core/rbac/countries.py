"""Translate between ISO-3166 alpha-2 codes and internal tenant country values.

Admin scopes store ISO codes (``IN``); tenant records store lower-case
internal names (``india``). Codes outside the table fall back to a case-folded
identity so new markets keep working before they are added here.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

ISO_TO_TENANT_COUNTRY: Mapping[str, str] = MappingProxyType(
    {
        "IN": "india",
        "AE": "uae",
        "GB": "uk",
        "MY": "malaysia",
        "SG": "singapore",
        "US": "united_states",
        "AU": "australia",
        "CA": "canada",
        "NZ": "new_zealand",
        "DE": "germany",
        "FR": "france",
        "ES": "spain",
        "IT": "italy",
        "NL": "netherlands",
        "ZA": "south_africa",
        "NG": "nigeria",
        "BR": "brazil",
        "JP": "japan",
        "CN": "china",
        "SA": "saudi_arabia",
    }
)

TENANT_COUNTRY_TO_ISO: Mapping[str, str] = MappingProxyType(
    {internal: iso for iso, internal in ISO_TO_TENANT_COUNTRY.items()}
)


def iso_to_internal(code: str) -> str:
    candidate = code.strip()
    return ISO_TO_TENANT_COUNTRY.get(candidate.upper(), candidate.lower())


def internal_to_iso(value: str) -> str:
    candidate = value.strip()
    return TENANT_COUNTRY_TO_ISO.get(candidate.lower(), candidate.upper())


def iso_to_tenant_countries(codes: Iterable[str]) -> list[str]:
    """Map every ISO code to its internal value, preserving order."""

    return [iso_to_internal(code) for code in codes]


def is_tenant_country_in_scope(
    internal_value: str | None,
    allowed_iso_codes: Iterable[str] | None,
) -> bool:
    """Return True when a tenant's country lies inside an ISO allow-list.

    An empty or missing country, or an empty allow-list, never matches.
    """

    if not internal_value:
        return False
    allowed = iso_to_tenant_countries(allowed_iso_codes or ())
    if not allowed:
        return False
    return internal_value.strip().lower() in allowed


__all__ = [
    "ISO_TO_TENANT_COUNTRY",
    "TENANT_COUNTRY_TO_ISO",
    "internal_to_iso",
    "is_tenant_country_in_scope",
    "iso_to_internal",
    "iso_to_tenant_countries",
]
