# licensemap/config.py

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Classification and aggregation settings, overridable from the environment."""

    # App
    app_name: str = "licensemap"

    # Classification tiers
    fuzzy_threshold: float = 0.5
    substring_boost: float = 0.7
    keyword_threshold: float = 0.2
    keyword_score_cap: float = 1.0
    keyword_min_containing_length: int = 3

    # Tier confidences
    exact_confidence: float = 1.0
    fuzzy_confidence: float = 0.8
    keyword_confidence_cap: float = 0.7
    vendor_confidence: float = 0.6
    high_confidence_threshold: float = 0.7

    # Cost reconciliation
    cost_match_threshold: float = 0.3
    cost_fuzzy_confidence_cap: float = 0.99

    # Inventory (license usage) fields
    application_field: str = "Application - Product"
    user_field: str = "Assigned user - Email"
    last_used_field: str = "Installations - Last used date"
    cost_field: str = "License - Total cost"
    unknown_application: str = "Unknown"

    # Per-user charge (UBC) fields
    cost_application_field: str = "ApplicationName"
    cost_charge_field: str = "StatutoryCharge"
    cost_user_field: str = "Email"
    cost_service_type_field: str = "ServiceType"
    cost_revenue_stream_field: str = "RevenueStream"
    cost_business_code_field: str = "BusinessCode"

    # Per-seat service charge (DSC) fields
    charge_group_field: str = "ServiceGroup"
    charge_subgroup_field: str = "ServiceSubgroup"
    charge_service_field: str = "Service"
    charge_user_field: str = "PerUser_Email"
    charge_quantity_field: str = "Quantity"
    charge_unit_price_field: str = "UnitPrice"
    charge_quarter_field: str = "ReportingQuarter"

    # Batch driver
    chunk_size: int = 500
    max_workers: int = 1
    max_generation_retries: int = 1

    # Reporting
    unclassified_sample_size: int = 10
    suggestion_limit: int = 3

    class Config:
        env_prefix = "LICENSEMAP_"
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
