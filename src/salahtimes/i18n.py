"""Simple two-language (en/ar) translation helper."""

_STRINGS: dict[str, dict[str, str]] = {
    "page_title": {
        "en": "Prayer Times",
        "ar": "مواقيت الصلاة",
    },
    "label_location": {
        "en": "Location",
        "ar": "الموقع",
    },
    "label_latitude": {
        "en": "Latitude",
        "ar": "خط العرض",
    },
    "label_longitude": {
        "en": "Longitude",
        "ar": "خط الطول",
    },
    "label_method": {
        "en": "Calculation method",
        "ar": "طريقة الحساب",
    },
    "label_madhab": {
        "en": "Asr (madhab)",
        "ar": "العصر (المذهب)",
    },
    "madhab_standard": {
        "en": "Standard (Shafi'i, Maliki, Hanbali)",
        "ar": "الجمهور (الشافعي، المالكي، الحنبلي)",
    },
    "madhab_hanafi": {
        "en": "Hanafi",
        "ar": "الحنفي",
    },
    "btn_search": {
        "en": "Search",
        "ar": "بحث",
    },
    "btn_use_my_location": {
        "en": "Use my location",
        "ar": "استخدم موقعي",
    },
    "placeholder_address": {
        "en": "City or address",
        "ar": "المدينة أو العنوان",
    },
    "source_api": {
        "en": "Live times",
        "ar": "مواقيت مباشرة",
    },
    "source_local": {
        "en": "Offline-estimated times",
        "ar": "مواقيت محسوبة دون اتصال",
    },
    "degraded_accuracy": {
        "en": "High latitude: {events} estimated with the one-seventh-of-night rule.",
        "ar": "خط عرض مرتفع: تم تقدير {events} بقاعدة سُبع الليل.",
    },
    "next_prayer": {
        "en": "Next: {name} at {time} (in {countdown})",
        "ar": "الصلاة القادمة: {name} الساعة {time} (بعد {countdown})",
    },
    "next_prayer_tomorrow": {
        "en": "Next: tomorrow's {name} at {time} (in {countdown})",
        "ar": "الصلاة القادمة: {name} غدًا الساعة {time} (بعد {countdown})",
    },
    "qibla_title": {
        "en": "Qibla",
        "ar": "القبلة",
    },
    "qibla_distance": {
        "en": "{km:,.0f} km to the Kaaba",
        "ar": "{km:,.0f} كم إلى الكعبة",
    },
    "qibla_kaaba": {
        "en": "You are at the Kaaba",
        "ar": "أنت عند الكعبة",
    },
    "qibla_antipode": {
        "en": "Every direction faces the Kaaba",
        "ar": "جميع الاتجاهات نحو الكعبة",
    },
    "hijri_date": {
        "en": "Hijri date: {date}",
        "ar": "التاريخ الهجري: {date}",
    },
    "error_address": {
        "en": "Could not find that place: {error}",
        "ar": "تعذر العثور على المكان: {error}",
    },
    "error_coordinate": {
        "en": "Invalid coordinate: {error}",
        "ar": "إحداثيات غير صالحة: {error}",
    },
    "error_all_sources": {
        "en": "Unable to calculate prayer times. Please check your connection.",
        "ar": "تعذر حساب مواقيت الصلاة. يرجى التحقق من الاتصال.",
    },
    "fallback_location": {
        "en": "Location unavailable, showing Mecca.",
        "ar": "الموقع غير متاح، يتم عرض مكة المكرمة.",
    },
}

PRAYER_LABELS: dict[str, dict[str, str]] = {
    "Fajr": {"en": "Fajr", "ar": "الفجر"},
    "Sunrise": {"en": "Sunrise", "ar": "الشروق"},
    "Dhuhr": {"en": "Dhuhr", "ar": "الظهر"},
    "Asr": {"en": "Asr", "ar": "العصر"},
    "Maghrib": {"en": "Maghrib", "ar": "المغرب"},
    "Isha": {"en": "Isha", "ar": "العشاء"},
}


def t(key: str, lang: str) -> str:
    """Return the translated string for key in lang.

    Falls back to 'en', then to the key itself if not found.
    """
    entry = _STRINGS.get(key)
    if entry is None:
        return key
    return entry.get(lang) or entry.get("en") or key


def prayer_label(name: str, lang: str) -> str:
    entry = PRAYER_LABELS.get(name.capitalize())
    if entry is None:
        return name
    return entry.get(lang) or entry["en"]
