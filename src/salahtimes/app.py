"""Salah Times — Streamlit page for today's prayer times, countdown and Qibla."""

import datetime
import html
import logging

import pytz
import streamlit as st
from dotenv import load_dotenv
from streamlit_js_eval import get_geolocation, streamlit_js_eval

load_dotenv()

from salahtimes.arbiter import SourceArbiter  # noqa: E402
from salahtimes.compute import (  # noqa: E402
    GeocodingError,
    compute_qibla,
    compute_schedule_for_zone,
    geocode_address,
    local_today,
    location_from_browser,
    resolve_timezone,
)
from salahtimes.errors import AllSourcesFailed, InvalidCoordinate  # noqa: E402
from salahtimes.i18n import prayer_label, t  # noqa: E402
from salahtimes.methods import DEFAULT_METHOD_ID, available_methods  # noqa: E402
from salahtimes.models import GeoCoordinate, Madhab, PrayerSchedule, Source  # noqa: E402
from salahtimes.nextprayer import format_12_hour, next_prayer  # noqa: E402
from salahtimes.qibla import KAABA  # noqa: E402
from salahtimes.renderers.compass_svg import render_compass_svg  # noqa: E402
from salahtimes.settings import load_settings  # noqa: E402

_settings = load_settings()
logging.basicConfig(
    level=_settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# --- Language detection (browser-first via streamlit-js-eval) ---
# On the first run the JS call returns None; the rerun triggered by
# streamlit_js_eval fills it in.
if "lang" not in st.session_state:
    _browser_lang: str | None = streamlit_js_eval(
        js_expressions="navigator.language", key="_lang_detect", height=0
    )
    if _browser_lang is not None:
        st.session_state.lang = "ar" if _browser_lang.lower().startswith("ar") else "en"

_lang: str = st.session_state.get("lang", "en")

st.set_page_config(
    page_title=t("page_title", _lang),
    page_icon="🕌",
    layout="centered",
)

# --- Session state initialization ---

if "location" not in st.session_state:
    st.session_state.location = None
if "place_label" not in st.session_state:
    st.session_state.place_label = ""
if "method_id" not in st.session_state:
    st.session_state.method_id = DEFAULT_METHOD_ID
if "madhab" not in st.session_state:
    st.session_state.madhab = Madhab.STANDARD
if "geo_attempt" not in st.session_state:
    st.session_state.geo_attempt = 0
if "geo_failed" not in st.session_state:
    st.session_state.geo_failed = False
if "error_msg" not in st.session_state:
    st.session_state.error_msg = None
if "computed_key" not in st.session_state:
    st.session_state.computed_key = None
if "schedule" not in st.session_state:
    st.session_state.schedule = None
if "tomorrow" not in st.session_state:
    st.session_state.tomorrow = None

st.title(t("page_title", _lang))

# --- Location: browser geolocation, address search, manual, Mecca fallback ---

col_addr, col_btn = st.columns([4, 1])
with col_addr:
    address = st.text_input(
        t("label_location", _lang),
        placeholder=t("placeholder_address", _lang),
        label_visibility="collapsed",
    )
with col_btn:
    if st.button(t("btn_search", _lang), use_container_width=True) and address.strip():
        try:
            coord, display = geocode_address(address.strip(), _settings)
            st.session_state.location = coord
            st.session_state.place_label = display
            st.session_state.error_msg = None
        except GeocodingError as e:
            st.session_state.error_msg = t("error_address", _lang).format(error=html.escape(str(e)))

if st.button(t("btn_use_my_location", _lang)):
    st.session_state.location = None
    st.session_state.geo_attempt += 1
    st.session_state.geo_failed = False

if st.session_state.location is None and not st.session_state.geo_failed:
    # None until the browser answers; session_state stays empty so the next rerun reads it.
    try:
        browser_location = location_from_browser(
            get_geolocation(component_key=f"_geo_{st.session_state.geo_attempt}")
        )
    except GeocodingError as e:
        logger.info("%s", e)
        st.session_state.geo_failed = True
    else:
        if browser_location is not None:
            st.session_state.location = browser_location
            st.session_state.place_label = ""

# Mecca stands in until a real location arrives; it is never stored.
location: GeoCoordinate = st.session_state.location or KAABA
place_label: str = st.session_state.place_label if st.session_state.location else "Mecca"
if st.session_state.location is None:
    st.info(t("fallback_location", _lang))

with st.expander(t("label_location", _lang)):
    c1, c2 = st.columns(2)
    lat = c1.number_input(
        t("label_latitude", _lang),
        value=float(location.latitude),
        format="%.4f",
    )
    lng = c2.number_input(
        t("label_longitude", _lang),
        value=float(location.longitude),
        format="%.4f",
    )
    if (lat, lng) != (location.latitude, location.longitude):
        try:
            location = st.session_state.location = GeoCoordinate(lat, lng)
            place_label = st.session_state.place_label = ""
        except InvalidCoordinate as e:
            st.session_state.error_msg = t("error_coordinate", _lang).format(error=html.escape(str(e)))

# --- Preferences ---

_methods = available_methods()
_method_ids = [m.id for m in _methods]
_method_names = {m.id: f"{m.name} - {m.description}" if m.description else m.name for m in _methods}
c_method, c_madhab = st.columns(2)
with c_method:
    st.session_state.method_id = st.selectbox(
        t("label_method", _lang),
        options=_method_ids,
        index=_method_ids.index(st.session_state.method_id),
        format_func=lambda i: _method_names[i],
    )
with c_madhab:
    st.session_state.madhab = st.radio(
        t("label_madhab", _lang),
        options=[Madhab.STANDARD, Madhab.HANAFI],
        index=0 if st.session_state.madhab is Madhab.STANDARD else 1,
        format_func=lambda m: t(f"madhab_{m.name.lower()}", _lang),
    )

if st.session_state.error_msg:
    st.error(st.session_state.error_msg)

# --- Compute (only on day rollover or preference change; latest input wins) ---

try:
    tz_name = resolve_timezone(location)
except GeocodingError:
    tz_name = "UTC"
today = local_today(tz_name)
key = (location, today, st.session_state.method_id, st.session_state.madhab, tz_name)

if st.session_state.computed_key != key:
    arbiter = SourceArbiter(_settings)
    try:
        st.session_state.schedule = compute_schedule_for_zone(
            location, today, st.session_state.method_id, st.session_state.madhab, tz_name,
            arbiter=arbiter,
        )
        st.session_state.tomorrow = None
        st.session_state.computed_key = key
    except AllSourcesFailed as e:
        logger.error("Prayer times unavailable: %s", e)
        st.session_state.schedule = None
        st.session_state.computed_key = None
        st.error(t("error_all_sources", _lang))
        st.stop()

schedule: PrayerSchedule = st.session_state.schedule

if place_label:
    st.caption(place_label)
st.caption(f"{today:%A %d %B %Y} · {tz_name}")
if schedule.hijri_date:
    st.caption(t("hijri_date", _lang).format(date=schedule.hijri_date))

if schedule.source is Source.API:
    st.success(t("source_api", _lang))
else:
    st.warning(t("source_local", _lang))
if schedule.degraded_accuracy:
    events = ", ".join(
        prayer_label(e, _lang) for e in schedule.adjusted_events + schedule.rolled_over_events
    )
    st.warning(t("degraded_accuracy", _lang).format(events=events))

st.table(
    {
        "": [prayer_label(name, _lang) for name, _ in schedule.events()],
        "⏰": [f"{when:%H:%M}  ({format_12_hour(when)})" for _, when in schedule.events()],
    }
)


@st.fragment(run_every=datetime.timedelta(seconds=1))
def _countdown() -> None:
    now = datetime.datetime.now(pytz.timezone(tz_name))
    if now.date() != schedule.date:
        st.rerun()
    if now > schedule.isha and st.session_state.tomorrow is None:
        try:
            st.session_state.tomorrow = compute_schedule_for_zone(
                location,
                schedule.date + datetime.timedelta(days=1),
                st.session_state.method_id,
                st.session_state.madhab,
                tz_name,
                arbiter=SourceArbiter(_settings),
            )
        except AllSourcesFailed as e:
            logger.warning("Tomorrow's prayer times unavailable: %s", e)
            st.session_state.tomorrow = False
    tomorrow = st.session_state.tomorrow or None
    upcoming = next_prayer(schedule, now, tomorrow)
    label_key = "next_prayer_tomorrow" if upcoming.is_tomorrow else "next_prayer"
    st.subheader(
        t(label_key, _lang).format(
            name=prayer_label(upcoming.name, _lang),
            time=f"{upcoming.time:%H:%M}",
            countdown=upcoming.countdown,
        )
    )


_countdown()

# --- Qibla ---

st.subheader(t("qibla_title", _lang))
qibla = compute_qibla(location)
st.markdown(render_compass_svg(qibla, _lang), unsafe_allow_html=True)
if qibla.degenerate is None:
    st.caption(t("qibla_distance", _lang).format(km=qibla.distance_km))
