import os
from pydantic import BaseModel
from dotenv import load_dotenv
from functools import lru_cache
from typing import List, Optional

load_dotenv()

class Settings(BaseModel):
    PROJECT_NAME: str = "Meal Planner API"
    VERSION: str = "1.0.0"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ALLOW_ORIGINS: str = os.getenv("CORS_ALLOW_ORIGINS", "")

    # Supabase (store + identity provider)
    SUPABASE_URL: Optional[str] = os.getenv("SUPABASE_URL")
    SUPABASE_KEY: Optional[str] = os.getenv("SUPABASE_KEY") or os.getenv("SUPABASE_ANON_KEY")
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    SUPABASE_JWT_SECRET: Optional[str] = os.getenv("SUPABASE_JWT_SECRET")
    JWT_AUDIENCE: str = os.getenv("JWT_AUDIENCE", "authenticated")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")

    # Gemini
    GEMINI_API_KEY: Optional[str] = os.getenv("GEMINI_API_KEY")
    MODEL_NAME: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
    MAX_TOKENS: int = int(os.getenv("MEALPLAN_MAX_TOKENS", "8192"))
    TEMPERATURE: float = float(os.getenv("MEALPLAN_TEMPERATURE", "0.4"))
    # Language recipes, ingredients and categories must be written in
    RESPONSE_LANGUAGE: str = os.getenv("MEALPLAN_LANGUAGE", "Polish")

    @property
    def allowed_origins(self) -> List[str]:
        origins = [o.strip() for o in self.CORS_ALLOW_ORIGINS.split(",") if o.strip()]
        return origins or ["http://localhost:4321", "http://127.0.0.1:4321"]


@lru_cache
def get_settings():
    return Settings()
