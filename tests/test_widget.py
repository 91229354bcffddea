# ordering and lifecycle of the view state, completion order is driven with threading.Event

import copy
import threading
import pytest
from conftest import make_response
from weatherwidget.client import WeatherAPIClient
from weatherwidget.location import FixedGeolocation, GeolocationProvider, LocationDeniedError, LocationResolver
from weatherwidget.models import ErrorKind
from weatherwidget.render import render
from weatherwidget.state import Failed, Idle, Loading, Resolved
from weatherwidget.widget import WeatherWidget

TIMEOUT = 5


class GatedClient:
    # fake client: each query returns its own payload, optionally after an event is set
    def __init__(self, payloads, gates=None):
        self.payloads = payloads
        self.gates = gates or {}
        self.queries = []
        self.started = threading.Event()

    def get_forecast(self, query):
        q = query.serialize()
        self.queries.append(q)
        self.started.set()
        gate = self.gates.get(q)
        if gate is not None:
            assert gate.wait(TIMEOUT)
        return self.payloads[q]


def named(payload, name):
    payload["location"]["name"] = name
    return payload


class Refusing(GeolocationProvider):
    def current_position(self):
        raise LocationDeniedError("permission denied")


class GatedGeolocation(GeolocationProvider):
    def __init__(self, gate):
        self.gate = gate

    def current_position(self):
        assert self.gate.wait(TIMEOUT)
        return FixedGeolocation(48.8566, 2.3522).current_position()


def test_initial_state_is_idle():
    with WeatherWidget(GatedClient({}), LocationResolver()) as widget:
        assert widget.state == Idle()


def test_start_with_position_resolves(payload):
    client = GatedClient({"48.8566,2.3522": payload})
    with WeatherWidget(client, LocationResolver(FixedGeolocation(48.8566, 2.3522))) as widget:
        widget.start().result(TIMEOUT)
        assert isinstance(widget.state, Resolved)
    assert client.queries == ["48.8566,2.3522"]


def test_start_without_capability_fails_unavailable():
    with WeatherWidget(GatedClient({}), LocationResolver(None)) as widget:
        widget.start().result(TIMEOUT)
        assert widget.state.error.kind is ErrorKind.LOCATION_UNAVAILABLE


def test_empty_submit_is_noop():
    client = GatedClient({})
    with WeatherWidget(client, LocationResolver()) as widget:
        assert widget.submit("") is None
        assert widget.state == Idle()
    assert client.queries == []


def test_stale_response_does_not_overwrite_newer(payload):
    slow = threading.Event()
    client = GatedClient(
        {"Lyon": named(copy.deepcopy(payload), "Lyon"), "Paris": payload},
        gates={"Lyon": slow},
    )
    with WeatherWidget(client, LocationResolver()) as widget:
        first = widget.submit("Lyon")
        widget.submit("Paris").result(TIMEOUT)
        assert widget.state.snapshot.location_name == "Paris"

        # the first request completes last
        slow.set()
        first.result(TIMEOUT)
        assert widget.state.snapshot.location_name == "Paris"


def test_late_position_does_not_trigger_request(payload):
    gate = threading.Event()
    client = GatedClient({"Paris": payload})
    with WeatherWidget(client, LocationResolver(GatedGeolocation(gate))) as widget:
        located = widget.start()
        widget.submit("Paris").result(TIMEOUT)
        gate.set()
        located.result(TIMEOUT)
        assert widget.state.snapshot.location_name == "Paris"
    assert client.queries == ["Paris"]


def test_submit_shows_loading_before_result(payload):
    gate = threading.Event()
    client = GatedClient({"Paris": payload}, gates={"Paris": gate})
    seen = []
    with WeatherWidget(client, LocationResolver(), on_change=seen.append) as widget:
        pending = widget.submit("Paris")
        assert widget.state == Loading()
        gate.set()
        pending.result(TIMEOUT)
    assert seen[0] == Loading()
    assert isinstance(seen[1], Resolved)


def test_failure_replaces_previous_snapshot(client, session, payload):
    session.get.side_effect = [make_response(200, payload), make_response(500, text="boom")]
    with WeatherWidget(client, LocationResolver()) as widget:
        widget.submit("Paris").result(TIMEOUT)
        widget.submit("Paris").result(TIMEOUT)
        assert isinstance(widget.state, Failed)
        assert widget.state.error.kind is ErrorKind.NETWORK_FAILURE


def test_completion_after_close_is_noop(payload):
    gate = threading.Event()
    client = GatedClient({"Paris": payload}, gates={"Paris": gate})
    seen = []
    widget = WeatherWidget(client, LocationResolver(), on_change=seen.append)
    pending = widget.submit("Paris")
    # close only once the request is on the wire, queued work would be cancelled instead
    assert client.started.wait(TIMEOUT)
    widget.close()
    gate.set()
    pending.result(TIMEOUT)

    assert widget.state == Loading()
    assert seen == [Loading()]
    with pytest.raises(RuntimeError):
        widget.submit("Paris")


def test_denied_then_manual_search_end_to_end(client, session, payload):
    session.get.return_value = make_response(200, payload)
    screens = []

    with WeatherWidget(client, LocationResolver(Refusing()), on_change=lambda s: screens.append(render(s))) as widget:
        widget.start().result(TIMEOUT)
        assert screens[-1] == "Unable to retrieve your location. Please enter a city name."

        widget.submit("Paris").result(TIMEOUT)

    assert session.get.call_args.kwargs["params"]["q"] == "Paris"
    assert screens[0] == "Loading weather data..."
    view = screens[-1]
    assert view.startswith("Paris - Wednesday, May 1, 2024")
    assert "18°C" in view
    # never an error alongside the snapshot
    assert "Unable" not in view
    cards = [line for line in view.splitlines() if line.startswith(("Wednesday:", "Thursday:", "Friday:"))]
    assert cards == [
        "Wednesday: ☀ 15.3°C Sunny",
        "Thursday: 🌧 14.1°C Light rain",
        "Friday: 💧 12.5°C Heavy rain",
    ]


class Broken:
    # client or provider that fails outside the classified error types
    def __init__(self, exc):
        self.exc = exc

    def get_forecast(self, query):
        raise self.exc

    def current_position(self):
        raise self.exc


def test_unexpected_client_error_leaves_loading():
    with WeatherWidget(Broken(RuntimeError("boom")), LocationResolver()) as widget:
        pending = widget.submit("Paris")
        assert isinstance(pending.exception(TIMEOUT), RuntimeError)
        assert widget.state.error.kind is ErrorKind.NETWORK_FAILURE
        assert widget.state.error.detail == "boom"


def test_unexpected_provider_error_leaves_loading():
    with WeatherWidget(GatedClient({}), LocationResolver(Broken(OSError()))) as widget:
        located = widget.start()
        assert isinstance(located.exception(TIMEOUT), OSError)
        assert widget.state.error.kind is ErrorKind.LOCATION_DENIED
        assert widget.state.error.detail == "OSError"


def test_unencodable_text_fails_as_network_error(settings):
    # requests cannot put a lone surrogate into the url, nothing is sent
    with WeatherWidget(WeatherAPIClient(settings), LocationResolver()) as widget:
        widget.submit("Par\udcffis").result(TIMEOUT)
        assert isinstance(widget.state, Failed)
        assert widget.state.error.kind is ErrorKind.NETWORK_FAILURE
