"""
Gender normalization and best-effort detection for imported names.

Detection is a heuristic over small curated name lists and is not
authoritative. Its precedence is fixed: exact list match, then substring
fragments (male before female), then vowel/consonant endings, then unisex.
"""

from __future__ import annotations

from catalog_app.importer.mapping import ColumnMapping, ImportOptions
from catalog_app.models.catalog import Gender

from .extract import CandidateRecord

MALE_SYNONYMS = frozenset({"male", "m", "boy", "masculine"})
FEMALE_SYNONYMS = frozenset({"female", "f", "girl", "feminine"})
UNISEX_SYNONYMS = frozenset({"unisex", "u", "both", "neutral"})

INTERNATIONAL_MALE_NAMES = frozenset(
    {
        "john", "david", "michael", "james", "robert", "william", "richard", "charles", "thomas",
        "christopher", "daniel", "matthew", "anthony", "mark", "donald", "steven", "paul", "andrew",
        "joshua", "kenneth", "kevin", "brian", "george", "edward", "ronald", "timothy", "jason",
        "jeffrey", "ryan", "jacob", "gary", "nicholas", "eric", "jonathan", "stephen", "larry",
        "justin", "scott", "brandon", "benjamin", "samuel", "gregory", "alexander", "patrick", "jack",
        "dennis", "jerry", "tyler", "aaron", "jose", "henry", "adam", "douglas", "nathan", "peter",
        "zachary", "kyle", "walter", "harold", "carl", "jeremy", "arthur", "lawrence", "sean",
        "christian", "ethan", "austin", "joe", "albert", "juan", "wayne", "roy", "ralph", "eugene",
        "louis", "philip", "bobby", "johnny", "raymond", "alex",
    }
)

INTERNATIONAL_FEMALE_NAMES = frozenset(
    {
        "mary", "patricia", "jennifer", "linda", "elizabeth", "barbara", "susan", "jessica", "sarah",
        "karen", "nancy", "lisa", "betty", "helen", "sandra", "donna", "carol", "ruth", "sharon",
        "michelle", "laura", "kimberly", "deborah", "dorothy", "amy", "angela", "brenda", "emma",
        "olivia", "cynthia", "marie", "janet", "catherine", "frances", "christine", "samantha",
        "debra", "rachel", "carolyn", "virginia", "maria", "heather", "diane", "julie", "joyce",
        "victoria", "kelly", "christina", "joan", "evelyn", "judith", "megan", "cheryl", "andrea",
        "hannah", "jacqueline", "martha", "gloria", "teresa", "sara", "janice", "julia", "grace",
        "judy", "theresa", "madison", "beverly", "denise", "marilyn", "amber", "danielle", "rose",
        "brittany", "diana", "abigail", "jane", "lori", "alexis", "kayla", "tiffany",
    }
)

INDIAN_MALE_NAMES = frozenset(
    {
        "kumar", "singh", "raj", "dev", "ram", "krishna", "arjun", "vikram", "suresh", "rajesh",
        "mohan", "ramesh", "anil", "sunil", "vijay", "sanjay", "ajay", "pradeep", "deepak", "manish",
        "naveen", "sachin", "rohit", "amit", "rahul", "sandeep", "vinod", "ashok", "dilip",
    }
)

INDIAN_FEMALE_NAMES = frozenset(
    {
        "kumari", "devi", "rani", "priya", "sita", "laxmi", "kavita", "sunita", "rekha", "meera",
        "pooja", "neha", "priyanka", "anjali", "deepika", "kiran", "usha", "sushma", "geeta", "radha",
        "sarita", "manju", "savita", "pinki", "sonia", "ritu", "shilpa",
    }
)

MALE_FRAGMENTS: tuple[str, ...] = ("kumar", "singh", "raj", "dev", "ram", "krishna")
FEMALE_FRAGMENTS: tuple[str, ...] = ("kumari", "devi", "rani", "priya", "sita", "laxmi")

FEMALE_ENDINGS: tuple[str, ...] = ("a", "i", "e")
MALE_ENDINGS: tuple[str, ...] = ("n", "r", "d")


def normalize_gender(value: str | None) -> Gender:
    """Map a free-form gender cell onto the canonical enum; unknown values become unisex."""

    if not value:
        return Gender.UNISEX
    token = value.strip().lower()
    if token in MALE_SYNONYMS:
        return Gender.MALE
    if token in FEMALE_SYNONYMS:
        return Gender.FEMALE
    if token in UNISEX_SYNONYMS:
        return Gender.UNISEX
    return Gender.UNISEX


def detect_gender(name: str) -> Gender:
    """Guess a gender from the name itself."""

    token = name.strip().lower()
    if not token:
        return Gender.UNISEX

    if token in INTERNATIONAL_MALE_NAMES or token in INDIAN_MALE_NAMES:
        return Gender.MALE
    if token in INTERNATIONAL_FEMALE_NAMES or token in INDIAN_FEMALE_NAMES:
        return Gender.FEMALE

    # "kumari" contains "kumar", so compound names resolve male here.
    for fragment in MALE_FRAGMENTS:
        if fragment in token:
            return Gender.MALE
    for fragment in FEMALE_FRAGMENTS:
        if fragment in token:
            return Gender.FEMALE

    if token.endswith(FEMALE_ENDINGS):
        return Gender.FEMALE
    if token.endswith(MALE_ENDINGS):
        return Gender.MALE
    return Gender.UNISEX


def should_detect_gender(mapping: ColumnMapping, options: ImportOptions) -> bool:
    return mapping.gender_is_auto or (options.auto_detect_gender and not mapping.has_gender_column)


def classify_gender(candidate: CandidateRecord, mapping: ColumnMapping, options: ImportOptions) -> Gender:
    """Resolve the final gender for ``candidate``."""

    if should_detect_gender(mapping, options):
        return detect_gender(candidate.name)
    if candidate.gender:
        return normalize_gender(candidate.gender)
    return Gender.UNISEX


def coerce_gender(value: object) -> Gender:
    """Last-line validation before a write; anything outside the enum becomes unisex."""

    if isinstance(value, Gender):
        return value
    try:
        return Gender(str(value).strip().lower())
    except ValueError:
        return Gender.UNISEX
