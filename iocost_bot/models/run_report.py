"""
Run Report Model
================
Pydantic model summarising one ingestion run for the downstream PR step.

Fields:
    outcome         - "published" | "inactive_issue" | "no_links"
    issue_number    - triggering issue number
    accepted_urls   - URLs that passed the allowlist, in order of appearance
    rejected_urls   - URLs that were ignored
    model_dirs      - touched model directories, in order of first touch
    staged_paths    - every path included in the commit
    branch          - bot branch that was pushed (empty unless published)
    commit_sha      - commit the branch points at (empty unless published)
"""
from typing import List

from pydantic import BaseModel

OUTCOME_PUBLISHED = "published"
OUTCOME_INACTIVE = "inactive_issue"
OUTCOME_NO_LINKS = "no_links"


class RunReport(BaseModel):
    outcome: str
    issue_number: int
    accepted_urls: List[str] = []
    rejected_urls: List[str] = []
    model_dirs: List[str] = []
    staged_paths: List[str] = []
    branch: str = ""
    commit_sha: str = ""
