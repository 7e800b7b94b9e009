from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Immo Access API"
    ENV: str = "development"

    # -------------------------------------------------
    # Frontend Domains
    # -------------------------------------------------
    FRONTEND_DOMAIN: Optional[str] = Field(None, env="FRONTEND_DOMAIN")

    FRONTEND_DOMAINS: List[str] = [
        "http://localhost:3000",
    ]

    # -------------------------------------------------
    # CORS (auto-built below)
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Primary DB & Auth)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = Field(None, env="SUPABASE_URL")
    SUPABASE_ANON_KEY: Optional[str] = Field(None, env="SUPABASE_ANON_KEY")
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(None, env="SUPABASE_SERVICE_ROLE_KEY")

    # -------------------------------------------------
    # Plans / Profiles
    # -------------------------------------------------
    DEFAULT_PLAN_NAME: str = Field("freemium", env="DEFAULT_PLAN_NAME")
    SUPER_ADMIN_PLAN_NAME: str = Field("enterprise", env="SUPER_ADMIN_PLAN_NAME")
    GLOBAL_ADMIN_PROFILE_NAME: str = Field("Global Administrator", env="GLOBAL_ADMIN_PROFILE_NAME")
    PLAN_FEATURES_CACHE_TTL: int = Field(
        300,
        env="PLAN_FEATURES_CACHE_TTL",
        description="Seconds a plan's enabled feature set stays cached (default: 300)",
    )

    # -------------------------------------------------
    # Payments
    # -------------------------------------------------
    # Bypasses the payment provider when ENV == "development"
    SKIP_PAYMENT_IN_DEV: bool = Field(False, env="SKIP_PAYMENT_IN_DEV")
    DEFAULT_CURRENCY: str = Field("XOF", env="DEFAULT_CURRENCY")
    YEARLY_DISCOUNT_FACTOR: float = Field(
        0.8,
        env="YEARLY_DISCOUNT_FACTOR",
        description="Applied to 12 x monthly price when a plan has no yearly price",
    )

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
cors_origins = []

# 1) add the configured frontend domain
if settings.FRONTEND_DOMAIN:
    domain = settings.FRONTEND_DOMAIN
    if not domain.startswith("http"):
        domain = f"https://{domain}"
    cors_origins.append(domain.rstrip("/"))

# 2) add static frontend domains
cors_origins.extend([d.rstrip("/") for d in settings.FRONTEND_DOMAINS])

# 3) remove duplicates
settings.BACKEND_CORS_ORIGINS = sorted(list(set(cors_origins)))
