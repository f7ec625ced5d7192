"""Published-entry export schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class ExportMeta(BaseModel):
    """Metadata envelope for BI connectors."""

    total: int
    generated_at: datetime
    source: str
    version: str
    stats: Dict[str, int]


class PublishedExportResponse(BaseModel):
    """Flattened published entries."""

    success: bool = True
    total_results: int
    data: List[Dict[str, Any]]
    meta: Optional[ExportMeta] = None
