from pydantic import BaseModel, Field


class ProfileManifestEntry(BaseModel):
    name: str
    capabilities: list[str] = Field(default_factory=list)
    supports: list[str] = Field(default_factory=list)
    description: str = ""
