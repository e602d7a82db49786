"""
Paper parsers for the Hackathon Scout application.

The ``arxiv_search`` tool hands the raw ArXiv Atom feed to the model
untouched.  The UI additionally wants a tabular view of the papers it
found, so this module turns a feed into a Pandas DataFrame using the
same canonical citation columns throughout: ``id``, ``title``,
``abstract``, ``year``, ``authors``, ``journal``, ``doi``,
``keywords``, ``url`` and ``pdf_url``.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

import pandas as pd  # type: ignore
from bs4 import BeautifulSoup  # type: ignore
from dateutil import parser as date_parser  # type: ignore

from .literature import is_fetch_error

logger = logging.getLogger(__name__)

CITATION_COLUMNS = [
    'id', 'title', 'abstract', 'year', 'authors', 'journal', 'doi',
    'keywords', 'url', 'pdf_url',
]


def normalize_year(date_str: Any) -> Optional[int]:
    """Coerce a variety of date representations into a four‑digit year.

    Returns an integer year if one can be extracted and falls within
    1900–2100, otherwise returns ``None``.  Strings are parsed with
    `dateutil.parser.parse` and numeric values are cast directly.
    """
    if date_str is None or date_str == '' or (isinstance(date_str, float) and pd.isna(date_str)):
        return None
    try:
        if isinstance(date_str, (int, float)):
            year = int(date_str)
            return year if 1900 <= year <= 2100 else None
        parsed = date_parser.parse(str(date_str))
        return parsed.year
    except (ValueError, OverflowError):
        # fall back to regex search for a 4‑digit year
        match = re.search(r"\b(19|20)\d{2}\b", str(date_str))
        if match:
            return int(match.group())
    return None


def _clean(text: str) -> str:
    return re.sub(r'\s+', ' ', text).strip()


def _child_text(entry: Any, name: str) -> str:
    elem = entry.find(name, recursive=False)
    return _clean(elem.get_text()) if elem else ''


def parse_arxiv_feed(xml_text: str) -> pd.DataFrame:
    """Parse an ArXiv Atom feed into a DataFrame of papers.

    Returns an empty DataFrame with the canonical columns when the
    text is the fetcher's error placeholder or contains no entries.
    """
    if not xml_text or is_fetch_error(xml_text):
        return pd.DataFrame(columns=CITATION_COLUMNS)
    soup = BeautifulSoup(xml_text, 'xml')
    citations: List[Dict[str, Any]] = []
    for entry in soup.find_all('entry'):
        url = _child_text(entry, 'id')
        article_id = url.rsplit('/abs/', 1)[-1] if '/abs/' in url else url
        authors = [
            _clean(name.get_text())
            for name in (author.find('name') for author in entry.find_all('author'))
            if name is not None and name.get_text().strip()
        ]
        pdf_url = ''
        for link in entry.find_all('link'):
            if link.get('title') == 'pdf' or link.get('type') == 'application/pdf':
                pdf_url = link.get('href', '')
                break
        doi_elem = entry.find('doi')
        journal_elem = entry.find('journal_ref')
        categories = [c.get('term') for c in entry.find_all('category') if c.get('term')]
        citations.append({
            'id': f"arxiv:{article_id}" if article_id else f"arxiv_{len(citations)}",
            'title': _child_text(entry, 'title'),
            'abstract': _child_text(entry, 'summary'),
            'year': normalize_year(_child_text(entry, 'published')),
            'authors': authors,
            'journal': _clean(journal_elem.get_text()) if journal_elem else 'arXiv',
            'doi': _clean(doi_elem.get_text()) if doi_elem else '',
            'keywords': categories,
            'url': url,
            'pdf_url': pdf_url,
        })
    logger.debug(f"Parsed {len(citations)} papers from ArXiv feed")
    return pd.DataFrame(citations, columns=CITATION_COLUMNS)
