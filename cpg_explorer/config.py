from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings."""
    
    # Graph store
    cpg_db_path: str = Field(default="cpg.db", description="Path to the SQLite CPG database")
    
    # API server
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8080)
    cors_origins: str = Field(default="*")
    
    # Call-graph traversal
    call_graph_neighbor_cap: int = Field(default=30)
    call_graph_default_depth: int = Field(default=2)
    call_graph_max_depth: int = Field(default=5)
    
    # Data-flow traversal
    data_flow_neighbor_cap: int = Field(default=25)
    data_flow_default_depth: int = Field(default=3)
    data_flow_max_depth: int = Field(default=6)
    
    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_file: str = Field(default="logs/cpg_explorer.log")
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
    
    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = Settings()
