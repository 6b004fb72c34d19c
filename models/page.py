from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class FetchedPage:
    url: str
    final_url: str # URL after redirects
    status: int
    headers: Dict[str, str] # lower-cased header names
    html: str
    csp_header: Optional[str] = None
