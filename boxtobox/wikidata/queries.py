"""SPARQL templates for the Wikidata endpoint.

Templates use str.format(); literal braces are doubled. Labels must go
through escape_literal() before interpolation.
"""

# Instance-of constraints per entity type
COUNTRY_TYPE_FILTER = "{{ ?entity wdt:P31 wd:Q6256. }} UNION {{ ?entity wdt:P31 wd:Q3624078. }}"

# Association football clubs playing in one of the big five leagues
CLUB_TYPE_FILTER = """
      ?entity wdt:P31 wd:Q476028.
      ?entity wdt:P118 ?league.
      VALUES ?league {{
        wd:Q9448
        wd:Q324867
        wd:Q13394
        wd:Q82595
        wd:Q13394653
      }}
"""

RESOLVE_ENTITY_QUERY = """
SELECT DISTINCT ?entity ?entityLabel ?countryLabel ?sitelinks WHERE {{
  {{
    ?entity rdfs:label "{label}"@{lang}.
  }} UNION {{
    ?entity skos:altLabel "{label}"@{lang}.
  }}
  {type_filter}
  OPTIONAL {{ ?entity wdt:P17 ?country. }}
  OPTIONAL {{ ?entity wikibase:sitelinks ?sitelinks. }}
  SERVICE wikibase:label {{ bd:serviceParam wikibase:language "{lang}". }}
}}
ORDER BY DESC(?sitelinks)
LIMIT 10
"""

FIND_PLAYER_BY_NAME_QUERY = """
SELECT DISTINCT ?player ?playerLabel ?dob ?pobLabel ?description WHERE {{
  {{
    ?player rdfs:label "{name}"@{lang}.
  }} UNION {{
    ?player skos:altLabel "{name}"@{lang}.
  }} UNION {{
    ?player rdfs:label ?label.
    FILTER(CONTAINS(LCASE(?label), LCASE("{name}")))
    FILTER(LANG(?label) = "{lang}")
  }}
  ?player wdt:P31 wd:Q5.
  ?player wdt:P106 wd:Q937857.
  OPTIONAL {{ ?player wdt:P569 ?dob. }}
  OPTIONAL {{ ?player wdt:P19 ?pob. }}
  OPTIONAL {{ ?player schema:description ?description. FILTER(LANG(?description) = "{lang}") }}
  SERVICE wikibase:label {{ bd:serviceParam wikibase:language "{lang}". }}
}}
LIMIT 20
"""

PLAYER_DETAILS_QUERY = """
SELECT DISTINCT ?country ?countryLabel ?club ?clubLabel ?startTime ?endTime WHERE {{
  VALUES ?player {{ wd:{qid} }}
  OPTIONAL {{ ?player wdt:P27 ?country. }}
  OPTIONAL {{
    ?player p:P54 ?clubStatement.
    ?clubStatement ps:P54 ?club.
    OPTIONAL {{ ?clubStatement pq:P580 ?startTime. }}
    OPTIONAL {{ ?clubStatement pq:P582 ?endTime. }}
  }}
  SERVICE wikibase:label {{ bd:serviceParam wikibase:language "{lang}". }}
}}
"""

# One triple pattern per criterion type; p:P54/ps:P54 covers past clubs too
CRITERION_PATTERNS = {
    "country": "?player wdt:P27 wd:{qid}.",
    "club": "?player p:P54/ps:P54 wd:{qid}.",
}

MATCH_BOTH_QUERY = """
SELECT DISTINCT ?player ?playerLabel WHERE {{
  {row_pattern}
  {col_pattern}
  SERVICE wikibase:label {{ bd:serviceParam wikibase:language "{lang}". }}
}}
"""

CLUB_SQUAD_QUERY = """
SELECT DISTINCT ?player ?playerLabel ?countryLabel WHERE {{
  ?player p:P54/ps:P54 wd:{qid}.
  ?player wdt:P27 ?country.
  ?player wdt:P31 wd:Q5.
  SERVICE wikibase:label {{ bd:serviceParam wikibase:language "{lang}". }}
}}
"""


def escape_literal(value: str) -> str:
    """Escape a value for use inside a double-quoted SPARQL string literal."""
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", " ")


def qid_from_uri(uri: str) -> str:
    """http://www.wikidata.org/entity/Q7156 -> Q7156"""
    return uri.rstrip("/").split("/")[-1]


def binding_value(binding: dict, key: str):
    return binding.get(key, {}).get("value")


def year_from_binding(binding: dict, key: str):
    """Extract the year of an xsd:dateTime binding ("2004-07-01T00:00:00Z")."""
    value = binding_value(binding, key)
    if not value:
        return None
    try:
        sign = -1 if value.startswith("-") else 1
        return sign * int(value.lstrip("+-")[:4])
    except ValueError:
        return None
