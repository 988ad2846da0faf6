"""
Common contract for all sieves.

A sieve receives one document and the temporal links established so far, and
returns the new links it proposes. Merging proposals from several sieves and
keeping the document graph consistent is the caller's job.
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Type

from tsieve.documents import SieveDocument, TLink
from tsieve.properties import SieveProperties


class Sieve(ABC):
    """Base class for sieves."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the sieve name."""
        pass

    @classmethod
    def from_properties(cls, properties: SieveProperties) -> "Sieve":
        """Build the sieve from a properties file. Sieves without options ignore it."""
        return cls()

    @abstractmethod
    def annotate(self, doc: SieveDocument, current_tlinks: List[TLink]) -> List[TLink]:
        """Return the links this sieve proposes for doc."""
        pass

    def train(self, documents: List[SieveDocument]):
        """Rule-based sieves have nothing to train."""
        pass


def sieve_classes() -> Dict[str, Type[Sieve]]:
    """Registered sieves by name."""
    from tsieve.baseline_sieve import BaselineEventDCTSieve
    from tsieve.reichenbach_sieve import ReichenbachSieve

    return {
        ReichenbachSieve.NAME: ReichenbachSieve,
        BaselineEventDCTSieve.NAME: BaselineEventDCTSieve,
    }


def create_sieve(name: str, properties: Optional[SieveProperties] = None) -> Sieve:
    """Instantiate a registered sieve, configured from properties."""
    classes = sieve_classes()
    if name not in classes:
        raise ValueError(f"Unknown sieve '{name}'. Choices: {sorted(classes.keys())}")
    return classes[name].from_properties(properties or SieveProperties())
