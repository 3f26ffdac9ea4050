"""
Employer lookup backed by the static HubSpot mapping dataset.

The dataset is a JSON object keyed by customer ID or street address:

    {"548 Pleasant Mill Rd": {"Company": 1021, "Company Name": "Acme Farms"}}

It is fetched once per EmployerDirectory and never refreshed. A failed load
leaves the directory empty, so every lookup misses.
"""

import re
import threading
from dataclasses import dataclass

import httpx

from dormancy_checker.config import settings
from dormancy_checker.core.logging import get_logger

log = get_logger(__name__)

STATE_PATTERN = re.compile(r"^[A-Z]{2}$")
ZIP_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")

STREET_SUFFIXES = {
    "st", "street", "ave", "avenue", "rd", "road", "dr", "drive",
    "ln", "lane", "ct", "court", "pl", "place", "way", "blvd",
    "boulevard", "hwy", "highway", "pkwy", "parkway", "nw", "ne", "sw", "se",
}


@dataclass(frozen=True)
class EmployerMapping:
    """Company an account holder works for."""

    company_id: int | str | None
    company_name: str


def extract_street_address(full_address: str) -> str | None:
    """
    Strip trailing city/state/ZIP tokens from a one-line address.

    "548 Pleasant Mill Rd Charlotte NC 28203" -> "548 Pleasant Mill Rd"
    """
    if not full_address:
        return None
    parts = full_address.split()
    if len(parts) < 2:
        return None

    street_end = len(parts)
    for i in range(1, len(parts)):
        part = parts[i]
        if STATE_PATTERN.match(part) or ZIP_PATTERN.match(part):
            street_end = i
            break
        # City name right before a state code or two tokens before a ZIP
        if (
            i < len(parts) - 2
            and part[0] == part[0].upper()
            and part.lower() not in STREET_SUFFIXES
            and (STATE_PATTERN.match(parts[i + 1]) or ZIP_PATTERN.match(parts[i + 2]))
        ):
            street_end = i
            break

    street = parts[:street_end]
    return " ".join(street) if street else None


class EmployerDirectory:
    """Lazily loaded, read-only employer mapping."""

    def __init__(
        self,
        source_url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ):
        self.source_url = source_url or settings.employer_mapping_url
        self.timeout = timeout if timeout is not None else settings.employer_mapping_timeout_seconds
        self._client = client
        self._mappings: dict[str, EmployerMapping] | None = None
        self._casefolded: dict[str, EmployerMapping] = {}
        self._lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._mappings is not None

    def load(self) -> None:
        """Fetch the dataset once. Safe to call repeatedly."""
        if self._mappings is not None:
            return
        with self._lock:
            if self._mappings is not None:
                return
            mappings = self._fetch()
            casefolded: dict[str, EmployerMapping] = {}
            for key, mapping in mappings.items():
                casefolded.setdefault(key.lower(), mapping)
            self._casefolded = casefolded
            self._mappings = mappings

    def _fetch(self) -> dict[str, EmployerMapping]:
        log.info("employer_mappings_loading", url=self.source_url)
        try:
            if self._client is not None:
                response = self._client.get(self.source_url, timeout=self.timeout)
            else:
                response = httpx.get(self.source_url, timeout=self.timeout)
            response.raise_for_status()
            raw = response.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            log.error("employer_mappings_load_failed", error=str(e))
            return {}
        except Exception as e:
            # Injected clients may raise anything
            log.exception("employer_mappings_load_failed", error=str(e))
            return {}

        if not isinstance(raw, dict):
            log.warning("employer_mappings_invalid", type=type(raw).__name__)
            return {}

        mappings = {}
        for key, entry in raw.items():
            if not isinstance(entry, dict) or not entry.get("Company Name"):
                continue
            mappings[str(key)] = EmployerMapping(
                company_id=entry.get("Company"),
                company_name=entry["Company Name"],
            )

        log.info(
            "employer_mappings_loaded",
            mappings=len(mappings),
            companies=len({m.company_name for m in mappings.values()}),
        )
        return mappings

    def _match(self, key: str) -> EmployerMapping | None:
        """Exact match, then case-insensitive match."""
        mapping = self._mappings.get(key)
        if mapping is None:
            mapping = self._casefolded.get(key.lower())
        return mapping

    def lookup_customer(self, customer_id: str) -> EmployerMapping | None:
        """Direct lookup by Unit customer ID."""
        self.load()
        if not customer_id:
            return None
        return self._mappings.get(customer_id)

    def lookup_address(self, address: str) -> EmployerMapping | None:
        """
        Match a formatted address against the dataset.

        Tries the full address, then the street portion alone.
        """
        self.load()
        if not address:
            return None

        mapping = self._match(address)
        if mapping is not None:
            return mapping

        street = extract_street_address(address)
        if street and street != address:
            return self._match(street)
        return None

    def resolve(self, customer_id: str, address: str | None = None) -> EmployerMapping | None:
        """Customer-ID lookup first, address match as fallback."""
        return self.lookup_customer(customer_id) or (
            self.lookup_address(address) if address else None
        )

    def stats(self) -> dict:
        self.load()
        return {
            "totalMappings": len(self._mappings),
            "totalCompanies": len({m.company_name for m in self._mappings.values()}),
            "sampleKeys": list(self._mappings)[:5],
        }
