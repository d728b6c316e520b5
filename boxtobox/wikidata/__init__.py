"""Wikidata access: SPARQL templates and the async HTTP client."""

from boxtobox.wikidata.client import WikidataClient

__all__ = ["WikidataClient"]
