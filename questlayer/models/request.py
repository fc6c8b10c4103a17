from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class IngestRequest(BaseModel):
    url: Optional[str] = None
    urls: Optional[List[str]] = Field(
        default=None,
        description="Several URLs to ingest one after another; takes precedence over `url`.",
    )

    @model_validator(mode="after")
    def _require_urls(self) -> "IngestRequest":
        if not self.targets():
            raise ValueError("Missing urls.")
        return self

    def targets(self) -> List[str]:
        """Return the URLs to process, in submission order.

        A `urls` array wins over `url` even when empty, and its entries are
        passed through as given so every one of them gets a result.
        """
        if self.urls is not None:
            return list(self.urls)
        if self.url and self.url.strip():
            return [self.url]
        return []
