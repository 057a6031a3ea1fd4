"""Centralized configuration using Pydantic Settings.

Every tunable of the offer engine lives here: parsing defaults,
identifier correlation prefixes, request grouping constants and the
seat solver's row-proximity offset.

Configuration can be overridden via environment variables:
- NDC_PARSE_DEFAULT_CURRENCY=NZD
- NDC_MATCH_INCLUDE_ALL_ON_NO_MATCH=false
- NDC_SEAT_ROW_OFFSET_PER_SEGMENT=4
- etc.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Dict, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ParsingConfig(BaseSettings):
    """Shopping/pricing document parsing defaults.

    Environment variables prefixed with NDC_PARSE_.
    """

    model_config = SettingsConfigDict(env_prefix="NDC_PARSE_")

    default_currency: str = "AUD"
    default_owner_code: str = "JQ"
    bundle_rfic: str = "G"
    bundle_rfisc: str = "0L8"
    ssr_rfic: str = "P"
    rfic_categories: Dict[str, str] = Field(
        default_factory=lambda: {"C": "baggage", "A": "seat", "F": "meal"}
    )


class MatchingConfig(BaseSettings):
    """Bundle-to-offer identifier correlation.

    Environment variables prefixed with NDC_MATCH_.
    """

    model_config = SettingsConfigDict(env_prefix="NDC_MATCH_")

    journey_ref_prefixes: Tuple[str, ...] = ("fl",)
    # Longest prefix first, "Mkt-seg" must win over "seg"
    segment_ref_prefixes: Tuple[str, ...] = ("Mkt-seg", "seg")
    include_all_on_no_match: bool = True


class RequestConfig(BaseSettings):
    """Price request construction and rendering.

    Environment variables prefixed with NDC_REQUEST_.
    """

    model_config = SettingsConfigDict(env_prefix="NDC_REQUEST_")

    owner_code: str = "JQ"
    synthetic_bundle_suffix: str = "-bundle"
    infant_pax_prefix: str = "INF"
    container_id_pattern: str = r"^(.+-[a-f0-9-]+)-\d+$"
    segment_ref_strip_prefix: str = "Mkt-"
    message_namespace: str = (
        "http://www.iata.org/IATA/2015/EASD/00/IATA_OffersAndOrdersMessage"
    )
    common_types_namespace: str = (
        "http://www.iata.org/IATA/2015/EASD/00/IATA_OffersAndOrdersCommonTypes"
    )


class SeatingConfig(BaseSettings):
    """Seat assignment solver configuration.

    Environment variables prefixed with NDC_SEAT_.
    """

    model_config = SettingsConfigDict(env_prefix="NDC_SEAT_")

    row_offset_per_segment: int = 3
    unavailable_statuses: Tuple[str, ...] = ("O", "Z")


class ObservabilityConfig(BaseSettings):
    """Logging and observability configuration.

    Environment variables prefixed with NDC_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="NDC_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = False  # Set True for JSON logging


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

    Sub-configurations are accessed via attributes:

        config = get_config()
        print(config.parsing.default_currency)
        print(config.seating.row_offset_per_segment)

    Environment variables prefixed with NDC_.
    """

    model_config = SettingsConfigDict(env_prefix="NDC_")

    parsing: ParsingConfig = Field(default_factory=ParsingConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    request: RequestConfig = Field(default_factory=RequestConfig)
    seating: SeatingConfig = Field(default_factory=SeatingConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.

    Returns:
        The application configuration instance.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache.

    Call this in tests to ensure a fresh configuration is loaded.
    """
    get_config.cache_clear()
