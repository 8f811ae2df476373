from __future__ import annotations

import re
from typing import List

from bs4 import BeautifulSoup

from ..summarize.clean import clean_text
from ..types import CompanyRank

_index_symbol_re = re.compile(r"^[\^&]")
_numeric_re = re.compile(r"^[\d\s,.\-$%+]+$")
_header_re = re.compile(r"^(Rank|Company|Price|Change|%|Market)", re.I)


def is_company_name(name: str) -> bool:
    """Reject index symbols, numbers and header labels."""
    if not name or len(name) <= 2:
        return False
    if _index_symbol_re.match(name):
        return False
    if _numeric_re.match(name):
        return False
    if _header_re.match(name):
        return False
    return True


def _row_name(row, cells, name_cell: int) -> str:
    link = row.find("a")
    name = link.get_text("\n", strip=True) if link else ""
    if not name and len(cells) > name_cell:
        name = cells[name_cell].get_text("\n", strip=True)
    # logo alt text, ticker or price can follow on later lines
    first = name.split("\n")[0] if name else ""
    return clean_text(first)


def scrape_top_n(html: str, n: int, *, name_cell: int = 1) -> List[CompanyRank]:
    """
    Best effort: walk `table tbody tr` rows in order and collect up to n
    company names. May return fewer than n; callers decide what that means.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    out: List[CompanyRank] = []
    for row in soup.select("table tbody tr"):
        if len(out) >= n:
            break
        cells = row.find_all("td")
        if len(cells) < 2:
            continue
        name = _row_name(row, cells, name_cell)
        if is_company_name(name):
            out.append(CompanyRank(rank=len(out) + 1, company=name))
    return out
