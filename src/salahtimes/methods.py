"""Calculation method registry: closed, versioned table of twilight conventions."""

from salahtimes.errors import UnknownCalculationMethod
from salahtimes.models import CalculationMethod

# Bump whenever an angle or offset below changes: schedules computed under
# different registry versions are not expected to agree.
REGISTRY_VERSION = 1

# Adapters use this for users without a stored preference. get_method() never does.
DEFAULT_METHOD_ID = 4

_METHODS: dict[int, CalculationMethod] = {
    m.id: m
    for m in (
        CalculationMethod(
            id=0,
            name="Jafari",
            description="Shia Ithna-Ashari, Leva Institute, Qum",
            fajr_angle=16.0,
            isha_angle=14.0,
            maghrib_angle=4.0,
            api_method=0,
        ),
        CalculationMethod(
            id=1,
            name="MWL",
            description="Muslim World League",
            fajr_angle=18.0,
            isha_angle=17.0,
            api_method=3,
        ),
        CalculationMethod(
            id=2,
            name="ISNA",
            description="Islamic Society of North America",
            fajr_angle=15.0,
            isha_angle=15.0,
            api_method=2,
        ),
        CalculationMethod(
            id=3,
            name="Egyptian",
            description="Egyptian General Authority of Survey",
            fajr_angle=19.5,
            isha_angle=17.5,
            api_method=5,
        ),
        CalculationMethod(
            id=4,
            name="Umm al-Qura",
            description="Umm al-Qura University, Makkah",
            fajr_angle=18.5,
            isha_offset_minutes=90.0,
            api_method=4,
        ),
        CalculationMethod(
            id=5,
            name="Karachi",
            description="University of Islamic Sciences, Karachi",
            fajr_angle=18.0,
            isha_angle=18.0,
            api_method=1,
        ),
        CalculationMethod(
            id=7,
            name="Tehran",
            description="Institute of Geophysics, University of Tehran",
            fajr_angle=17.7,
            isha_angle=14.0,
            maghrib_angle=4.5,
            api_method=7,
        ),
        CalculationMethod(
            id=8,
            name="Gulf Region",
            fajr_angle=19.5,
            isha_offset_minutes=90.0,
            maghrib_offset_minutes=1.0,
            api_method=8,
        ),
        CalculationMethod(
            id=9,
            name="Kuwait",
            fajr_angle=18.0,
            isha_angle=17.5,
            api_method=9,
        ),
        CalculationMethod(
            id=10,
            name="Qatar",
            fajr_angle=18.0,
            isha_offset_minutes=90.0,
            api_method=10,
        ),
        CalculationMethod(
            id=11,
            name="Singapore",
            description="Majlis Ugama Islam Singapura",
            fajr_angle=20.0,
            isha_angle=18.0,
            maghrib_offset_minutes=2.0,
            api_method=11,
        ),
        CalculationMethod(
            id=12,
            name="France",
            description="Union Organization Islamic de France",
            fajr_angle=12.0,
            isha_angle=12.0,
            api_method=12,
        ),
        CalculationMethod(
            id=13,
            name="Turkey",
            description="Diyanet Isleri Baskanligi",
            fajr_angle=18.0,
            isha_angle=17.0,
            api_method=13,
        ),
        CalculationMethod(
            id=14,
            name="Russia",
            description="Spiritual Administration of Muslims of Russia",
            fajr_angle=16.0,
            isha_angle=15.0,
            api_method=14,
        ),
        CalculationMethod(
            id=16,
            name="Dubai",
            fajr_angle=18.2,
            isha_angle=18.2,
            maghrib_offset_minutes=3.0,
            api_method=16,
        ),
    )
}


def get_method(method_id: int | str) -> CalculationMethod:
    """Look up a method by id ("4" and 4 are equivalent).

    Raises:
        UnknownCalculationMethod: Id not registered, or not an integer.
    """
    if isinstance(method_id, bool):
        raise UnknownCalculationMethod(method_id)
    key: int
    if isinstance(method_id, int):
        key = method_id
    elif isinstance(method_id, str) and method_id.strip().isdigit():
        key = int(method_id.strip())
    else:
        raise UnknownCalculationMethod(method_id)
    try:
        return _METHODS[key]
    except KeyError:
        raise UnknownCalculationMethod(method_id) from None


def available_methods() -> tuple[CalculationMethod, ...]:
    """All registered methods, default first, then by id (settings picker order)."""
    return (_METHODS[DEFAULT_METHOD_ID],) + tuple(
        m for key, m in sorted(_METHODS.items()) if key != DEFAULT_METHOD_ID
    )


def method_for_api_code(code: int | str) -> CalculationMethod:
    """Look up a method by the remote provider's method number.

    Raises:
        UnknownCalculationMethod: No registered method maps to that number.
    """
    if isinstance(code, bool):
        raise UnknownCalculationMethod(code)
    try:
        key = int(code)
    except (TypeError, ValueError):
        raise UnknownCalculationMethod(code) from None
    for method in _METHODS.values():
        if method.api_method == key:
            return method
    raise UnknownCalculationMethod(code)
