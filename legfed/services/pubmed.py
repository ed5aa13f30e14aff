"""
PubMed lookups for Publication enrichment.

Publications named only by PMID get their citation (title, journal,
year, volume, pages, DOI and authors) from a Medline record; publications
with a journal, year and first author but no PMID are searched for, and
used only when the search has exactly one hit.
"""

import logging
import re
from typing import Optional

from Bio import Entrez, Medline

from legfed.conversion.errors import PublicationLookupError
from legfed.core.settings import settings
from legfed.models.item import Item

logger = logging.getLogger(__name__)

DOI_PATTERN = re.compile(r"^(\S+)\s*\[doi\]$")


def medline_doi(record: dict) -> Optional[str]:
    for value in record.get("AID", []) + record.get("LID", "").split("\n"):
        match = DOI_PATTERN.match(value.strip())
        if match:
            return match.group(1)
    return None


def medline_year(record: dict) -> Optional[str]:
    match = re.match(r"(\d{4})", record.get("DP", ""))
    return match.group(1) if match else None


class PubMedClient:
    """Thin wrapper over Bio.Entrez."""

    def __init__(self, email: Optional[str] = None, api_key: Optional[str] = None):
        Entrez.email = email or settings.entrez_email
        key = api_key or settings.entrez_api_key
        if key:
            Entrez.api_key = key

    def fetch_summary(self, pmid: str) -> Optional[dict]:
        """
        Fetch the citation of one PubMed ID.

        Returns:
            Dict with title, journal, year, volume, pages, doi and authors,
            or None if PubMed has no such record
        """
        handle = Entrez.efetch(db="pubmed", id=str(pmid), rettype="medline", retmode="text")
        try:
            records = list(Medline.parse(handle))
        finally:
            handle.close()
        if not records or "PMID" not in records[0]:
            return None

        record = records[0]
        return {
            "title": record.get("TI"),
            "journal": record.get("TA") or record.get("JT"),
            "year": medline_year(record),
            "volume": record.get("VI"),
            "pages": record.get("PG"),
            "doi": medline_doi(record),
            "authors": record.get("AU", []),
        }

    def search(self, journal: str, year: str, author: str) -> Optional[str]:
        """Return the PMID matching journal, year and first author, if exactly one does."""
        term = f"{journal}[journal] AND {year}[pdat] AND {author}[author]"
        handle = Entrez.esearch(db="pubmed", term=term, retmax=2)
        try:
            result = Entrez.read(handle)
        finally:
            handle.close()

        ids = result.get("IdList", [])
        if len(ids) != 1:
            logger.debug(f"PubMed search '{term}' returned {len(ids)} hits")
            return None
        return str(ids[0])


class PublicationEnricher:
    """
    Fill in Publication citations from PubMed.

    Args:
        client: PubMedClient
        policy: "fail" raises PublicationLookupError when a lookup errors
            or finds nothing; "skip" logs a warning and leaves the
            publication as it is
    """

    def __init__(self, client: PubMedClient, policy: str = "skip"):
        if policy not in ("fail", "skip"):
            raise ValueError(f"Unknown publication lookup policy: {policy}")
        self.client = client
        self.policy = policy
        self.looked_up = 0

    def enrich(self, publication: Item, assembler) -> None:
        self.looked_up += 1
        pmid = publication.get_attribute("pubMedId")
        try:
            if pmid is None:
                pmid = self._search(publication)
                if pmid is None:
                    return
                publication.set_attribute("pubMedId", pmid)
            summary = self.client.fetch_summary(pmid)
        except PublicationLookupError:
            raise
        except Exception as e:
            self._failed(f"PubMed lookup failed for {publication.identifier}: {e}")
            return

        if summary is None:
            self._failed(f"PMID {pmid} not found in PubMed")
            return

        authors = summary.pop("authors")
        for name, value in summary.items():
            if value and not publication.has_attribute(name):
                publication.set_attribute(name, value)
        if authors and not publication.has_attribute("firstAuthor"):
            publication.set_attribute("firstAuthor", authors[0])
        for name in authors:
            assembler.link(publication, "authors", assembler.author(name))
        logger.debug(f"Enriched publication PMID:{pmid} with {len(authors)} authors")

    def _search(self, publication: Item) -> Optional[str]:
        journal = publication.get_attribute("journal")
        year = publication.get_attribute("year")
        author = publication.get_attribute("firstAuthor")
        if not (journal and year and author):
            return None
        return self.client.search(journal, year, author)

    def _failed(self, message: str) -> None:
        if self.policy == "fail":
            raise PublicationLookupError(message)
        logger.warning(message)


def enricher_from_settings(policy: Optional[str] = None) -> Optional[PublicationEnricher]:
    """Build the enricher PUBLICATION_LOOKUP asks for; None when it is "off"."""
    policy = policy or settings.publication_lookup
    if policy == "off":
        return None
    return PublicationEnricher(PubMedClient(), policy)
