"""Logical voter fields and the stored key paths that may hold them.

Every voter collection was imported from a different sheet, so the same
attribute lives under different keys: ``Part_no`` or ``part_no``,
``Number`` or ``voterID``, at the document root or nested under the ``s``
sub-document. Alias lists are ordered by precedence: a value found under
an earlier key wins over a later one, so root keys always come before
their ``s.`` counterparts.
"""

from collections.abc import Mapping

from kural.core.exceptions import UnsupportedFieldError

NAME = "name"
GUARDIAN_NAME = "guardianName"
EPIC_NUMBER = "epicNumber"
AGE = "age"
GENDER = "gender"
PART_NUMBER = "partNumber"
DOOR_NUMBER = "doorNumber"
MOBILE_NUMBER = "mobileNumber"
SERIAL_NUMBER = "serialNumber"

# Logical fields whose canonical value is an integer
INTEGER_FIELDS = frozenset({AGE, PART_NUMBER, SERIAL_NUMBER})

NESTED_KEY = "s"

# Shared by the category collections ("60 and above", "fatherless", ...)
_CATEGORY_ALIASES: dict[str, tuple[str, ...]] = {
    NAME: ("Name", "s.Name"),
    GUARDIAN_NAME: ("Father Name", "s.Father Name"),
    EPIC_NUMBER: ("Number", "s.Number"),
    AGE: ("age", "s.age"),
    GENDER: ("sex", "s.sex"),
    PART_NUMBER: ("Part_no", "part_no"),
    DOOR_NUMBER: ("Door_No", "Door_no", "s.Door_No", "s.Door_no"),
    MOBILE_NUMBER: ("Mobile No", "s.Mobile No"),
}

_VOTER_ALIASES: dict[str, tuple[str, ...]] = {
    NAME: ("Name", "name.english", "name.tamil", "s.Name"),
    GUARDIAN_NAME: ("Father Name", "fathername", "guardian", "s.Father Name"),
    EPIC_NUMBER: ("Number", "voterID", "s.Number"),
    AGE: ("age", "s.age"),
    GENDER: ("sex", "gender", "s.sex"),
    PART_NUMBER: ("Part_no", "boothno"),
    DOOR_NUMBER: ("Door_No", "doornumber", "s.Door_No"),
    MOBILE_NUMBER: ("Mobile No", "mobile", "mobileNumber", "s.Mobile No"),
    SERIAL_NUMBER: ("sr",),
}

_SOON_VOTER_ALIASES: dict[str, tuple[str, ...]] = {
    NAME: ("voterName",),
    GUARDIAN_NAME: ("relationName",),
    EPIC_NUMBER: ("epicId",),
    AGE: ("age",),
    GENDER: ("gender",),
    PART_NUMBER: ("part",),
    MOBILE_NUMBER: ("mobileNumber",),
    SERIAL_NUMBER: ("serialNo",),
}

ALIAS_TABLES: Mapping[str, Mapping[str, tuple[str, ...]]] = {
    "voters": _VOTER_ALIASES,
    "age60": _CATEGORY_ALIASES,
    "age80": _CATEGORY_ALIASES,
    "fatherless": _CATEGORY_ALIASES,
    "transgender": _CATEGORY_ALIASES,
    "mobile": _CATEGORY_ALIASES,
    "soon": _SOON_VOTER_ALIASES,
}


def _table(collection: str) -> Mapping[str, tuple[str, ...]]:
    try:
        return ALIAS_TABLES[collection]
    except KeyError:
        raise UnsupportedFieldError("*", collection) from None


def resolve_aliases(field: str, collection: str) -> list[str]:
    """
    Return the ordered key paths that may hold ``field`` in ``collection``.

    Raises:
        UnsupportedFieldError: the collection or the field has no mapping
    """
    table = _table(collection)
    if field not in table:
        raise UnsupportedFieldError(field, collection)
    return list(table[field])
