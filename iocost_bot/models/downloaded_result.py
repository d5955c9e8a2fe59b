"""
Downloaded Result Model
Pydantic model for one fetched result file, named by the md5 of its bytes.
"""
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class DownloadedResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    content_hash: str
    path: Path
    size: int

    @property
    def filename(self) -> str:
        return self.path.name
