from typing import Any, Dict, List

from pydantic import BaseModel, Field


class BackupData(BaseModel):
    clothes: List[Dict[str, Any]] = Field(default_factory=list)
    inventory: List[Dict[str, Any]] = Field(default_factory=list)
    stockIn: List[Dict[str, Any]] = Field(default_factory=list)
    stockOut: List[Dict[str, Any]] = Field(default_factory=list)


class BackupDocument(BaseModel):
    version: str
    timestamp: str
    data: BackupData


class ImportResult(BaseModel):
    version: str
    counts: Dict[str, int]
