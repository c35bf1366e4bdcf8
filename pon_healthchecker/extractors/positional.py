#!/usr/bin/env python3
"""
Positional Field Extractor
Pulls numeric fields out of an HTML page by the index of the matching tag
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

from bs4 import BeautifulSoup

from ..exceptions import ExtractionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldTable:
    """
    Declarative index table for one page layout

    ``fields`` maps a zero-based position in the sequence of ``tag`` elements
    to the sample attribute it feeds. Any markup change on the device page
    silently moves values between fields, so the table is the contract.
    """
    page: str
    tag: str
    fields: Tuple[Tuple[int, str], ...]

    @property
    def min_elements(self) -> int:
        return max(index for index, _ in self.fields) + 1


def parse_leading_float(text: str) -> float:
    """First whitespace-separated token as float, 0.0 when it does not parse"""
    tokens = text.split()
    if not tokens:
        return 0.0
    try:
        return float(tokens[0])
    except ValueError:
        return 0.0


def find_elements(html: str, tag: str) -> List:
    soup = BeautifulSoup(html, "html.parser")
    return soup.find_all(tag)


def extract_fields(html: str, table: FieldTable) -> Dict[str, float]:
    """
    Extract every field of ``table`` from ``html``

    Args:
        html: Page markup
        table: Index table for the page layout

    Returns:
        Mapping of field name to parsed value

    Raises:
        ExtractionError: The page has fewer ``tag`` elements than the table needs
    """
    elements = find_elements(html, table.tag)
    if len(elements) < table.min_elements:
        raise ExtractionError(
            table.page,
            f"expected at least {table.min_elements} <{table.tag}> elements, found {len(elements)}"
        )

    values = {}
    for index, name in table.fields:
        text = elements[index].get_text()
        values[name] = parse_leading_float(text)
        logger.debug(f"{table.page}: <{table.tag}>[{index}] {text.strip()!r} -> {name}={values[name]}")
    return values
