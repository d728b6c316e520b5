"""Builders for fake Wikidata bindings and entities."""

from boxtobox.models import Entity


def uri(qid: str) -> dict:
    return {"type": "uri", "value": f"http://www.wikidata.org/entity/{qid}"}


def literal(value) -> dict:
    return {"type": "literal", "value": str(value)}


def entity(qid: str, label: str, type: str = "club", popularity: int = 0) -> Entity:
    return Entity(id=qid, label=label, type=type, popularity=popularity)
